"""
Product edit session and save command schemas
"""

from decimal import Decimal
from typing import Any, List, Optional, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from bookcatalog.core.config import settings
from bookcatalog.schemas.category import CategoryNode, CategoryPath
from bookcatalog.schemas.media import CreateMedia, DeleteMedia, KeepMedia, MediaItem, MediaOp, MediaRole
from bookcatalog.schemas.product import ProductVariant, UploadedFile
from bookcatalog.utils.normalization import blank_to_none


class LookupItem(BaseModel):
    """Author or publisher entry from the creation model"""

    id: str
    name: str = Field(default="", validation_alias=AliasChoices("name", "penName", "title"))

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_string(cls, value: Any) -> Any:
        return None if value is None else str(value).strip()


class AuthorAssignment(BaseModel):
    """An author credited on the product"""

    id: Optional[str] = None
    author_id: str = Field(validation_alias=AliasChoices("authorId", "author_id"))
    role: str = "author"
    display_order: int = Field(default=0, validation_alias=AliasChoices("displayOrder", "display_order"))

    model_config = ConfigDict(populate_by_name=True)


class TagRef(BaseModel):
    id: Optional[str] = None
    name: str


class EditSession(BaseModel):
    """
    Everything the product editor holds between load and submit.

    Sessions are immutable; ``edit`` returns a new session with the
    given fields replaced.
    """

    product_id: str
    title: str = ""
    subtitle: Optional[str] = None
    description: str = ""
    isbn: Optional[str] = None
    publication_date: Optional[str] = None
    language: str = Field(default_factory=lambda: settings.default_language)
    pages: Optional[int] = None
    dimensions: Optional[str] = None
    weight: Optional[Decimal] = None
    age_group: Optional[str] = None
    edition: Optional[str] = None
    series: Optional[str] = None
    volume: Optional[int] = None
    is_active: bool = True
    meta_title: str = ""
    meta_description: str = ""
    meta_keywords: str = ""

    publisher_id: Optional[str] = None
    category_id: Optional[str] = None
    authors: List[AuthorAssignment] = []
    formats: List[ProductVariant] = []
    media: List[MediaItem] = []
    tags: List[str] = []

    # Server state the edits are compared against
    persisted_media: List[MediaItem] = []
    persisted_tags: List[TagRef] = []

    # Lookups loaded with the product
    categories: List[CategoryNode] = []
    author_lookup: List[LookupItem] = []
    publisher_lookup: List[LookupItem] = []

    model_config = ConfigDict(frozen=True)

    def edit(self, **changes: Any) -> "EditSession":
        return self.model_copy(update=changes)


class AuthorCommand(BaseModel):
    id: Optional[str] = None
    author_id: str
    author_name: str = ""
    role: Optional[str] = None
    display_order: int


def _text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Decimal):
        return format(value, "f")
    return str(value)


class SaveProductCommand(BaseModel):
    """The single payload handed to the catalog service's update endpoint"""

    product_id: str
    title: str
    subtitle: Optional[str] = None
    description: str
    isbn: Optional[str] = None
    publication_date: Optional[str] = None
    language: str
    pages: Optional[int] = None
    dimensions: Optional[str] = None
    weight: Optional[Decimal] = None
    age_group: Optional[str] = None
    edition: Optional[str] = None
    series: Optional[str] = None
    volume: Optional[int] = None
    is_active: bool = True
    meta_title: str
    meta_description: str
    meta_keywords: str
    publisher_id: str
    category_id: str
    category_path: CategoryPath
    formats: List[ProductVariant]
    authors: List[AuthorCommand]
    media: List[MediaOp]
    tags: List[TagRef] = []

    def to_form_fields(self) -> Tuple[List[Tuple[str, str]], List[Tuple[str, Tuple[str, bytes, str]]]]:
        """
        Flatten into the indexed multipart layout the service binds
        (``Formats[0].Price``, ``Media[2].IsDeleted``...). Returns
        ``(data, files)`` ready for an httpx request.
        """
        data: List[Tuple[str, str]] = []
        files: List[Tuple[str, Tuple[str, bytes, str]]] = []

        def put(key: str, value: Any) -> None:
            value = blank_to_none(value)
            if value is not None:
                data.append((key, _text(value)))

        def attach(key: str, upload: Optional[UploadedFile]) -> None:
            if upload is not None:
                files.append((key, (upload.filename, upload.content or b"", upload.content_type)))

        put("ProductId", self.product_id)
        put("Title", self.title)
        put("Subtitle", self.subtitle)
        put("Description", self.description)
        put("ISBN", self.isbn)
        put("PublicationDate", self.publication_date)
        put("Language", self.language)
        put("Pages", self.pages)
        put("Dimensions", self.dimensions)
        put("Weight", self.weight)
        put("AgeGroup", self.age_group)
        put("Edition", self.edition)
        put("Series", self.series)
        put("Volume", self.volume)
        put("IsActive", self.is_active)
        put("MetaTitle", self.meta_title)
        put("MetaDescription", self.meta_description)
        put("MetaKeywords", self.meta_keywords)
        put("PublisherId", self.publisher_id)
        put("CategoryId", self.category_id)

        for index, variant in enumerate(self.formats):
            prefix = f"Formats[{index}]"
            put(f"{prefix}.Id", variant.id)
            put(f"{prefix}.ProductId", self.product_id)
            put(f"{prefix}.FormatType", variant.format_type.value)
            put(f"{prefix}.FileType", variant.file_type)
            put(f"{prefix}.Price", variant.price)
            put(f"{prefix}.DiscountPrice", variant.discount_price)
            put(f"{prefix}.IsAvailable", variant.is_available)
            put(f"{prefix}.StockQuantity", variant.stock_quantity)
            put(f"{prefix}.IsTrackable", variant.is_physical)
            put(f"{prefix}.CreatedAt", variant.created_at)
            put(f"{prefix}.FileUrl", variant.file_url)
            put(f"{prefix}.FileSize", variant.file_size)
            attach(f"{prefix}.FormFormatFile", variant.file)

        for index, author in enumerate(self.authors):
            prefix = f"Authors[{index}]"
            put(f"{prefix}.Id", author.id)
            put(f"{prefix}.AuthorId", author.author_id)
            put(f"{prefix}.AuthorName", author.author_name)
            put(f"{prefix}.Role", author.role)
            put(f"{prefix}.DisplayOrder", author.display_order)

        first_format_id = self.formats[0].id if self.formats else None
        for index, op in enumerate(self.media):
            prefix = f"Media[{index}]"
            role: Optional[MediaRole] = op.role
            put(f"{prefix}.Id", getattr(op, "existing_id", None))
            put(f"{prefix}.ProductId", self.product_id)
            put(f"{prefix}.ProductFormatId", first_format_id)
            put(f"{prefix}.MediaRole", role.value if role else None)
            put(f"{prefix}.IsMain", role is MediaRole.COVER)
            put(f"{prefix}.Title", op.title)
            put(f"{prefix}.SortOrder", index)
            put(f"{prefix}.IsDeleted", isinstance(op, DeleteMedia))
            if isinstance(op, (KeepMedia, CreateMedia)):
                attach(f"{prefix}.FormFile", op.file)

        for index, tag in enumerate(self.tags):
            prefix = f"Tags[{index}]"
            put(f"{prefix}.Id", tag.id)
            put(f"{prefix}.Name", tag.name)
            put(f"{prefix}.IsActive", True)

        return data, files


class SaveResult(BaseModel):
    success: bool
    product_id: str
    message: Optional[str] = None
    media: dict = {}
