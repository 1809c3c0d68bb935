"""Product search and fuzzy similar-product detection."""

from decimal import Decimal
from typing import List, Optional, Tuple
from uuid import UUID

from django.db.models import Q, QuerySet
from fuzzywuzzy import fuzz

from ..models import Product


# Thresholds for fuzzy matching
HIGH_SIMILARITY_THRESHOLD = 90
MEDIUM_SIMILARITY_THRESHOLD = 80

ORDERINGS = {
    'newest': ['-created_at'],
    'price_asc': ['price', 'name'],
    'price_desc': ['-price', 'name'],
    'rating': ['-rating', '-review_count'],
    'popular': ['-purchase_count', '-view_count'],
}


def search_products(
    *,
    query: Optional[str] = None,
    category_id: Optional[UUID] = None,
    min_price: Optional[Decimal] = None,
    max_price: Optional[Decimal] = None,
    in_stock: Optional[bool] = None,
    credit_eligible: Optional[bool] = None,
    featured: Optional[bool] = None,
    tag: Optional[str] = None,
    ordering: str = 'newest'
) -> QuerySet:
    """
    Search active products with optional filters.

    Args:
        query: Matches name, brand, SKU or short description
        category_id: Category UUID (direct children included)
        min_price: Lower price bound (inclusive)
        max_price: Upper price bound (inclusive)
        in_stock: Only products with stock > 0
        credit_eligible: Only products sold on credit
        featured: Only featured products
        tag: Exact tag
        ordering: One of newest, price_asc, price_desc, rating, popular

    Returns:
        QuerySet of matching products
    """
    products = Product.objects.filter(is_active=True).select_related('category')

    if query:
        products = products.filter(
            Q(name__icontains=query) |
            Q(brand__icontains=query) |
            Q(sku__icontains=query) |
            Q(short_description__icontains=query)
        )

    if category_id:
        products = products.filter(Q(category_id=category_id) | Q(category__parent_id=category_id))

    if min_price is not None:
        products = products.filter(price__gte=min_price)
    if max_price is not None:
        products = products.filter(price__lte=max_price)

    if in_stock:
        products = products.filter(stock__gt=0)
    if credit_eligible is not None:
        products = products.filter(credit_eligible=credit_eligible)
    if featured is not None:
        products = products.filter(is_featured=featured)

    if tag:
        # JSON containment isn't available on SQLite, filter in Python.
        matching = [p.id for p in products if p.has_tag(tag)]
        products = products.filter(id__in=matching)

    return products.order_by(*ORDERINGS.get(ordering, ORDERINGS['newest']))


def find_similar_products(
    *,
    name: str,
    brand: str = '',
    threshold: int = MEDIUM_SIMILARITY_THRESHOLD,
    exclude_id: Optional[UUID] = None,
    limit: int = 10
) -> List[Tuple[Product, int]]:
    """
    Find catalog entries whose name (and brand) resemble the given ones.

    Used to warn about near-duplicate listings before creating a product.

    Returns:
        List of (product, similarity_score) sorted by score, best first
    """
    candidates = Product.objects.filter(is_active=True)
    if exclude_id:
        candidates = candidates.exclude(id=exclude_id)

    name_norm = name.lower().strip()
    brand_norm = brand.lower().strip()

    matches = []
    for product in candidates:
        name_score = fuzz.token_sort_ratio(name_norm, product.name.lower())
        if brand_norm and product.brand:
            score = (name_score + fuzz.ratio(brand_norm, product.brand.lower())) // 2
        else:
            score = name_score
        if score >= threshold:
            matches.append((product, score))

    matches.sort(key=lambda match: match[1], reverse=True)
    return matches[:limit]
