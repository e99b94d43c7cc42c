"""
Product edit endpoints
"""
from fastapi import APIRouter

from bookcatalog.api.deps import ProductEditorDep
from bookcatalog.schemas.product import VariantError, VariantValidationResponse
from bookcatalog.schemas.product_edit import EditSession, SaveProductCommand, SaveResult

router = APIRouter()


@router.get("/{product_id}/session", response_model=EditSession)
async def load_session(product_id: str, editor: ProductEditorDep) -> EditSession:
    """Product and lookups, ready to edit"""
    return await editor.load(product_id)


@router.post("/validate", response_model=VariantValidationResponse)
async def validate_session(session: EditSession, editor: ProductEditorDep) -> VariantValidationResponse:
    errors = [VariantError(field=e.field, reason=e.reason) for e in editor.validate_session(session)]
    return VariantValidationResponse(valid=not errors, errors=errors)


@router.post("/save-command", response_model=SaveProductCommand)
async def build_save_command(session: EditSession, editor: ProductEditorDep) -> SaveProductCommand:
    """Dry run: the command a save would send, or the first error"""
    return editor.build_save_command(session)


@router.put("/save", response_model=SaveResult)
async def save_product(session: EditSession, editor: ProductEditorDep) -> SaveResult:
    """Validate the session and send one save command to the catalog service"""
    return await editor.submit(session)
