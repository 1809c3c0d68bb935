"""Unique slug generation for categories and products."""

from django.db import models
from django.utils.text import slugify


def unique_slug(*, model: type[models.Model], value: str, exclude_id=None) -> str:
    """
    Slugify `value` and append -2, -3, ... until no row of `model` uses it.

    Soft-deleted rows are considered too since they keep their unique slug.
    """
    base = slugify(value) or 'item'
    candidate = base
    suffix = 2

    existing = model.all_objects.all()
    if exclude_id is not None:
        existing = existing.exclude(id=exclude_id)

    while existing.filter(slug=candidate).exists():
        candidate = f"{base}-{suffix}"
        suffix += 1
    return candidate
