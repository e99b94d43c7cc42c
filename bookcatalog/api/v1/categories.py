"""
Category hierarchy endpoints

The POST endpoints are stateless: the caller sends the category forest and
gets the answer computed over it. The admin endpoints at the bottom work on
the live tree held by the catalog service.
"""
from typing import List, Optional

from fastapi import APIRouter, Query

from bookcatalog.api.deps import CategoryEditorDep
from bookcatalog.schemas.category import (
    CategoryMoveResponse,
    CategoryParentUpdate,
    CategoryPathRequest,
    CategoryPathResponse,
    CategoryTreeRequest,
    FlatCategory,
    LegalParentsRequest,
    ReparentRequest,
    ReparentResponse,
)
from bookcatalog.services.category_hierarchy import CategoryHierarchy

router = APIRouter()


@router.post("/flatten", response_model=List[FlatCategory])
async def flatten_categories(request: CategoryTreeRequest) -> List[FlatCategory]:
    """Pre-order list with depth and indented labels"""
    return CategoryHierarchy(request.categories).flat_entries()


@router.post("/path", response_model=CategoryPathResponse)
async def category_path(request: CategoryPathRequest) -> CategoryPathResponse:
    hierarchy = CategoryHierarchy(request.categories)
    node = hierarchy.find_node(request.category_id)
    return CategoryPathResponse(category_id=node.id, path=hierarchy.path_to(node.id))


@router.post("/legal-parents", response_model=List[FlatCategory])
async def legal_parents(request: LegalParentsRequest) -> List[FlatCategory]:
    """Categories the excluded one may move under: not itself, not its descendants"""
    return CategoryHierarchy(request.categories).flat_entries(request.excluded_id)


@router.post("/reparent", response_model=ReparentResponse)
async def reparent_category(request: ReparentRequest) -> ReparentResponse:
    hierarchy = CategoryHierarchy(request.categories)
    node = hierarchy.reparent(request.node_id, request.new_parent_id)
    return ReparentResponse(
        node_id=node.id,
        parent_id=node.parent_id,
        path=hierarchy.path_to(node.id),
        categories=hierarchy.to_payload(),
    )


# ----- Live category tree -----

@router.get("/parent-options", response_model=List[FlatCategory])
async def parent_options(
    editor: CategoryEditorDep,
    category_id: Optional[str] = Query(None, alias="categoryId", description="Category being edited"),
) -> List[FlatCategory]:
    return await editor.parent_options(category_id)


@router.put("/{category_id}/parent", response_model=CategoryMoveResponse)
async def move_category(
    category_id: str,
    update: CategoryParentUpdate,
    editor: CategoryEditorDep,
) -> CategoryMoveResponse:
    node = await editor.move(category_id, update.parent_id)
    return CategoryMoveResponse(node_id=node.id, parent_id=node.parent_id)
