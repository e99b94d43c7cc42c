"""
API Dependencies for dependency injection
"""
from typing import Annotated, AsyncGenerator

from fastapi import Depends

from bookcatalog.services.catalog_client import CatalogService, HttpCatalogService
from bookcatalog.services.category_editor import CategoryEditor
from bookcatalog.services.product_editor import ProductEditor


# Catalog backend
async def get_catalog_service() -> AsyncGenerator[CatalogService, None]:
    """One catalog client per request, closed when the request ends"""
    async with HttpCatalogService() as catalog:
        yield catalog


CatalogServiceDep = Annotated[CatalogService, Depends(get_catalog_service)]


# Services
async def get_product_editor(catalog: CatalogServiceDep) -> ProductEditor:
    """Get product editor instance"""
    return ProductEditor(catalog)


async def get_category_editor(catalog: CatalogServiceDep) -> CategoryEditor:
    """Get category editor instance"""
    return CategoryEditor(catalog)


ProductEditorDep = Annotated[ProductEditor, Depends(get_product_editor)]
CategoryEditorDep = Annotated[CategoryEditor, Depends(get_category_editor)]
