"""
API Schemas (Pydantic models for request/response)
"""

from .category import (
    CategoryMoveResponse,
    CategoryNode,
    CategoryParentUpdate,
    CategoryPath,
    CategoryPathRequest,
    CategoryPathResponse,
    CategoryRecord,
    CategoryTreeRequest,
    FlatCategory,
    LegalParentsRequest,
    ReparentRequest,
    ReparentResponse,
)
from .common import HealthCheckResponse
from .media import (
    CreateMedia,
    DeleteMedia,
    KeepMedia,
    MediaItem,
    MediaOp,
    MediaRole,
    ReconcileRequest,
    ReconcileResponse,
)
from .product import (
    FormatType,
    ProductVariant,
    QuoteRequest,
    QuoteResponse,
    UploadedFile,
    VariantError,
    VariantValidationResponse,
)
from .product_edit import (
    AuthorAssignment,
    AuthorCommand,
    EditSession,
    LookupItem,
    SaveProductCommand,
    SaveResult,
    TagRef,
)

__all__ = [
    # Category
    "CategoryMoveResponse",
    "CategoryNode",
    "CategoryParentUpdate",
    "CategoryPath",
    "CategoryPathRequest",
    "CategoryPathResponse",
    "CategoryRecord",
    "CategoryTreeRequest",
    "FlatCategory",
    "LegalParentsRequest",
    "ReparentRequest",
    "ReparentResponse",
    # Common
    "HealthCheckResponse",
    # Media
    "CreateMedia",
    "DeleteMedia",
    "KeepMedia",
    "MediaItem",
    "MediaOp",
    "MediaRole",
    "ReconcileRequest",
    "ReconcileResponse",
    # Product
    "FormatType",
    "ProductVariant",
    "QuoteRequest",
    "QuoteResponse",
    "UploadedFile",
    "VariantError",
    "VariantValidationResponse",
    # Product edit
    "AuthorAssignment",
    "AuthorCommand",
    "EditSession",
    "LookupItem",
    "SaveProductCommand",
    "SaveResult",
    "TagRef",
]
