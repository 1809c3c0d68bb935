"""Services for catalog business logic."""

from .exceptions import (
    CatalogServiceError,
    CategoryNotFoundError,
    InvalidCategoryError,
    ProductNotFoundError,
    DuplicateProductError,
    InsufficientStockError,
    ImageNotFoundError,
    ReviewNotFoundError,
    DuplicateReviewError,
)
from .category_management import (
    create_category,
    update_category,
    get_category_by_id,
    get_category_tree,
)
from .product_management import (
    create_product,
    update_product,
    get_product_by_id,
    deactivate_product,
    adjust_stock,
    record_product_view,
    record_product_purchase,
)
from .product_search import (
    search_products,
    find_similar_products,
    HIGH_SIMILARITY_THRESHOLD,
    MEDIUM_SIMILARITY_THRESHOLD,
)
from .image_management import (
    add_product_image,
    set_primary_image,
    remove_product_image,
)
from .review_management import (
    create_review,
    approve_review,
    mark_review_helpful,
    delete_review,
    update_product_rating,
)

__all__ = [
    # Exceptions
    'CatalogServiceError',
    'CategoryNotFoundError',
    'InvalidCategoryError',
    'ProductNotFoundError',
    'DuplicateProductError',
    'InsufficientStockError',
    'ImageNotFoundError',
    'ReviewNotFoundError',
    'DuplicateReviewError',
    # Categories
    'create_category',
    'update_category',
    'get_category_by_id',
    'get_category_tree',
    # Products
    'create_product',
    'update_product',
    'get_product_by_id',
    'deactivate_product',
    'adjust_stock',
    'record_product_view',
    'record_product_purchase',
    # Search
    'search_products',
    'find_similar_products',
    'HIGH_SIMILARITY_THRESHOLD',
    'MEDIUM_SIMILARITY_THRESHOLD',
    # Images
    'add_product_image',
    'set_primary_image',
    'remove_product_image',
    # Reviews
    'create_review',
    'approve_review',
    'mark_review_helpful',
    'delete_review',
    'update_product_rating',
]
