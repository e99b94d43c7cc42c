"""
Service layer for business logic
"""

from .catalog_client import CatalogService, HttpCatalogService
from .category_editor import CategoryEditor
from .category_hierarchy import CategoryHierarchy
from .product_editor import ProductEditor

__all__ = [
    "CatalogService",
    "HttpCatalogService",
    "CategoryEditor",
    "CategoryHierarchy",
    "ProductEditor",
]
