"""Category CRUD operations service."""

import logging
from typing import Any, Dict, List, Optional
from uuid import UUID

from django.db import transaction

from ..models import Category
from .exceptions import CategoryNotFoundError, InvalidCategoryError
from .slugs import unique_slug

logger = logging.getLogger(__name__)


def get_category_by_id(*, category_id: UUID) -> Category:
    """
    Retrieve category by ID.

    Raises:
        CategoryNotFoundError: If category doesn't exist
    """
    try:
        return Category.objects.get(id=category_id)
    except Category.DoesNotExist:
        raise CategoryNotFoundError(f"Category {category_id} not found")


@transaction.atomic
def create_category(
    *,
    name: str,
    description: str = '',
    parent_id: Optional[UUID] = None,
    position: int = 0,
    is_active: bool = True,
    image_url: str = '',
    seo_title: str = '',
    seo_description: str = ''
) -> Category:
    """
    Create a category with a unique slug derived from its name.

    Args:
        name: Display name (2-100 characters)
        description: Long description
        parent_id: Parent category UUID for nesting
        position: Sort order among siblings
        is_active: Visibility flag
        image_url: Illustration URL
        seo_title: Page title (70 characters max)
        seo_description: Meta description (160 characters max)

    Returns:
        Created Category instance

    Raises:
        CategoryNotFoundError: If parent doesn't exist
        django.core.exceptions.ValidationError: If a field is invalid
    """
    parent = get_category_by_id(category_id=parent_id) if parent_id else None

    category = Category(
        name=name.strip(),
        description=description,
        slug=unique_slug(model=Category, value=name),
        parent=parent,
        position=position,
        is_active=is_active,
        image_url=image_url,
        seo_title=seo_title or name.strip()[:70],
        seo_description=seo_description,
    )
    category.full_clean()
    category.save()

    logger.info("Category created", extra={'category_id': str(category.id), 'slug': category.slug})
    return category


@transaction.atomic
def update_category(*, category_id: UUID, data: Dict[str, Any]) -> Category:
    """
    Update a category. Renaming regenerates the slug.

    Raises:
        CategoryNotFoundError: If category or new parent doesn't exist
        InvalidCategoryError: If the new parent is the category or one of its descendants
    """
    try:
        category = Category.objects.select_for_update().get(id=category_id)
    except Category.DoesNotExist:
        raise CategoryNotFoundError(f"Category {category_id} not found")

    allowed_fields = [
        'name', 'description', 'position', 'is_active',
        'image_url', 'seo_title', 'seo_description',
    ]

    for field, value in data.items():
        if field in allowed_fields:
            setattr(category, field, value)

    if 'name' in data:
        category.slug = unique_slug(model=Category, value=data['name'], exclude_id=category.id)

    if 'parent_id' in data:
        parent_id = data['parent_id']
        if parent_id is None:
            category.parent = None
        else:
            parent = get_category_by_id(category_id=parent_id)
            ancestor = parent
            while ancestor is not None:
                if ancestor.id == category.id:
                    raise InvalidCategoryError("A category cannot be nested under itself")
                ancestor = ancestor.parent
            category.parent = parent

    category.full_clean()
    category.save()
    return category


def get_category_tree(*, include_inactive: bool = False) -> List[Dict[str, Any]]:
    """
    Build the category hierarchy as nested dicts.

    Returns:
        List of root nodes, each {'id', 'name', 'slug', 'product_count', 'children': [...]}
    """
    categories = Category.objects.all()
    if not include_inactive:
        categories = categories.filter(is_active=True)

    nodes = {}
    for category in categories.order_by('position', 'name'):
        nodes[category.id] = {
            'id': category.id,
            'name': category.name,
            'slug': category.slug,
            'product_count': category.count_active_products(),
            'parent_id': category.parent_id,
            'children': [],
        }

    roots = []
    for node in nodes.values():
        parent = nodes.get(node.pop('parent_id'))
        if parent is not None:
            parent['children'].append(node)
        else:
            roots.append(node)
    return roots
