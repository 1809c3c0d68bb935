"""Tests for the shared base model and code lists."""

import pytest
from datetime import date
from django.core.exceptions import ValidationError

from apps.core.date_utils import add_months, add_periods
from apps.core.models import CodeList, StaleObjectError


@pytest.mark.django_db
class TestBaseModel:
    """Soft delete and optimistic locking."""

    def test_delete_is_soft(self):
        entry = CodeList.objects.create(type='ADDRESS_TYPE', code='HOME')

        entry.delete()

        assert not CodeList.objects.filter(id=entry.id).exists()
        assert CodeList.all_objects.get(id=entry.id).is_deleted is True

    def test_queryset_delete_is_soft(self):
        CodeList.objects.create(type='ADDRESS_TYPE', code='HOME')
        CodeList.objects.create(type='ADDRESS_TYPE', code='WORK')

        CodeList.objects.filter(type='ADDRESS_TYPE').delete()

        assert CodeList.objects.count() == 0
        assert CodeList.all_objects.count() == 2

    def test_save_increments_version(self):
        entry = CodeList.objects.create(type='ADDRESS_TYPE', code='HOME')
        assert entry.version == 0

        entry.label = 'Home'
        entry.save()

        entry.refresh_from_db()
        assert entry.version == 1
        assert entry.label == 'Home'

    def test_stale_save_rejected(self):
        entry = CodeList.objects.create(type='ADDRESS_TYPE', code='HOME')
        first = CodeList.objects.get(id=entry.id)
        second = CodeList.objects.get(id=entry.id)

        first.label = 'First'
        first.save()

        second.label = 'Second'
        with pytest.raises(StaleObjectError):
            second.save()

        entry.refresh_from_db()
        assert entry.label == 'First'

    def test_update_fields_also_writes_version(self):
        entry = CodeList.objects.create(type='ADDRESS_TYPE', code='HOME')

        entry.position = 4
        entry.save(update_fields=['position'])

        entry.refresh_from_db()
        assert entry.position == 4
        assert entry.version == 1


@pytest.mark.django_db
class TestCodeList:

    def test_composite_key(self):
        entry = CodeList(type='ORDER_STATUS', code='DELIVERED')
        assert entry.composite_key == 'ORDER_STATUS:DELIVERED'
        assert str(entry) == 'ORDER_STATUS:DELIVERED'

    def test_is_inactive(self):
        assert CodeList(type='X', code='Y', is_active=False).is_inactive() is True
        assert CodeList(type='X', code='Y').is_inactive() is False

    @pytest.mark.parametrize('type_, code', [
        ('order_status', 'CREATED'),
        ('ORDER-STATUS', 'CREATED'),
        ('ORDER_STATUS', 'created'),
        ('ORDER_STATUS', 'CRE-ATED'),
    ])
    def test_format_validation(self, type_, code):
        with pytest.raises(ValidationError):
            CodeList(type=type_, code=code).full_clean()


class TestDateUtils:

    def test_add_months_clamps_to_month_end(self):
        assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
        assert add_months(date(2023, 1, 31), 1) == date(2023, 2, 28)

    def test_add_months_crosses_year(self):
        assert add_months(date(2024, 11, 15), 3) == date(2025, 2, 15)

    def test_add_periods(self):
        start = date(2024, 1, 1)
        assert add_periods(start, periods_per_month=1, count=2) == date(2024, 3, 1)
        assert add_periods(start, periods_per_month=2, count=1) == date(2024, 1, 15)
        assert add_periods(start, periods_per_month=4, count=3) == date(2024, 1, 22)

    def test_add_periods_rejects_unknown_frequency(self):
        with pytest.raises(ValueError):
            add_periods(date(2024, 1, 1), periods_per_month=3, count=1)
