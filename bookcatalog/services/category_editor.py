"""
Category admin editor
"""
from typing import Any, Dict, List, Optional

from bookcatalog.core.exceptions import NotFoundError
from bookcatalog.core.logging import log
from bookcatalog.schemas.category import CategoryNode, FlatCategory
from bookcatalog.services.catalog_client import CatalogService
from bookcatalog.services.category_hierarchy import CategoryHierarchy
from bookcatalog.utils.normalization import camelize_keys, same_id


def _upper_first(key: str) -> str:
    return key[:1].upper() + key[1:] if key else key


class CategoryEditor:
    """Moves categories around the admin tree without ever creating a loop"""

    def __init__(self, catalog: CatalogService):
        self.catalog = catalog

    async def _records(self) -> List[Dict[str, Any]]:
        return [camelize_keys(record) for record in await self.catalog.get_categories(include_inactive=True)]

    async def load(self) -> CategoryHierarchy:
        return CategoryHierarchy.from_flat(await self._records())

    async def parent_options(self, category_id: Optional[str] = None) -> List[FlatCategory]:
        """Indented parent choices for the category form"""
        hierarchy = await self.load()
        return hierarchy.flat_entries(category_id)

    async def move(self, category_id: str, new_parent_id: Optional[str] = None) -> CategoryNode:
        """
        Reparent a category and persist it.

        The move is checked against a fresh copy of the tree first, so a
        cycle is rejected before anything is written.
        """
        records = await self._records()
        hierarchy = CategoryHierarchy.from_flat(records)
        node = hierarchy.reparent(category_id, new_parent_id)

        record = next((row for row in records if same_id(row.get("id"), node.id)), None)
        if record is None:
            raise NotFoundError(f"Category '{category_id}' not found", category_id=category_id)

        # The update endpoint binds PascalCase fields and replaces the whole row
        payload = {
            _upper_first(key): value
            for key, value in record.items()
            if key not in ("children", "subCategories")
        }
        payload.update({"Id": node.id, "Title": node.title, "ParentId": node.parent_id})

        await self.catalog.update_category(node.id, payload)
        log.info("Saved category parent", category_id=node.id, parent_id=node.parent_id)
        return node
