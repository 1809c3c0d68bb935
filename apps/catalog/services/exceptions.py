"""Domain-specific exceptions for catalog services."""


class CatalogServiceError(Exception):
    """Base exception for catalog services."""
    pass


class CategoryNotFoundError(CatalogServiceError):
    """Raised when category does not exist."""
    pass


class InvalidCategoryError(CatalogServiceError):
    """Raised when a category move would create a cycle."""
    pass


class ProductNotFoundError(CatalogServiceError):
    """Raised when product does not exist or is inactive."""
    pass


class DuplicateProductError(CatalogServiceError):
    """Raised when SKU is already used by another product."""
    pass


class InsufficientStockError(CatalogServiceError):
    """Raised when a stock movement would go below zero."""
    pass


class ImageNotFoundError(CatalogServiceError):
    """Raised when product image does not exist."""
    pass


class ReviewNotFoundError(CatalogServiceError):
    """Raised when review does not exist."""
    pass


class DuplicateReviewError(CatalogServiceError):
    """Raised when a user reviews the same product twice."""
    pass
