"""
Product media schemas
"""

from enum import Enum
from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from bookcatalog.schemas.product import UploadedFile
from bookcatalog.utils.normalization import blank_to_none, camelize_keys


class MediaRole(str, Enum):
    """Slot an image occupies on the product page"""

    COVER = "cover"
    BACK_COVER = "backCover"
    GALLERY = "gallery"

    @property
    def is_singleton(self) -> bool:
        return self is not MediaRole.GALLERY

    @classmethod
    def parse(cls, value: Any) -> "MediaRole":
        if isinstance(value, cls):
            return value
        normalized = str(value or "").strip().replace("_", "").replace("-", "").lower()
        for member in cls:
            if member.value.lower() == normalized:
                return member
        raise ValueError(f"unknown media role '{value}'")


SINGLETON_ROLES = tuple(role for role in MediaRole if role.is_singleton)


def compose_media_url(media_url: Optional[str], title: Optional[str]) -> Optional[str]:
    """The service stores a base path and a file name separately"""
    if media_url and title:
        return f"{media_url.rstrip('/')}/{title}"
    return media_url or None


class MediaItem(BaseModel):
    """An image attached to a product, persisted or pending upload"""

    id: Optional[str] = None
    role: MediaRole = Field(validation_alias=AliasChoices("role", "mediaRole"))
    title: Optional[str] = None
    url: Optional[str] = None
    file: Optional[UploadedFile] = None
    media_type: str = Field(default="image", validation_alias=AliasChoices("mediaType", "media_type"))

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def _accept_service_spelling(cls, data: Any) -> Any:
        data = camelize_keys(data)
        if isinstance(data, dict) and data.get("url") is None and data.get("mediaUrl") is not None:
            data = {**data, "url": compose_media_url(data["mediaUrl"], blank_to_none(data.get("title")))}
        return data

    @field_validator("role", mode="before")
    @classmethod
    def _narrow_role(cls, value: Any) -> MediaRole:
        if blank_to_none(value) is None:
            raise ValueError("media role is required")
        return MediaRole.parse(value)

    @field_validator("id", "title", "url", mode="before")
    @classmethod
    def _optional_text(cls, value: Any) -> Any:
        value = blank_to_none(value)
        return None if value is None else str(value)

    @field_validator("media_type", mode="before")
    @classmethod
    def _default_media_type(cls, value: Any) -> Any:
        return blank_to_none(value) or "image"

    @classmethod
    def from_record(cls, record: dict) -> "MediaItem":
        """Build from a media record as the catalog service returns it"""
        return cls.model_validate(record)


class KeepMedia(BaseModel):
    """Media that stays; the backend updates it in place"""

    op: Literal["keep"] = "keep"
    existing_id: str
    role: MediaRole
    title: Optional[str] = None
    file: Optional[UploadedFile] = None


class CreateMedia(BaseModel):
    """New media to upload"""

    op: Literal["create"] = "create"
    role: MediaRole
    title: Optional[str] = None
    file: UploadedFile


class DeleteMedia(BaseModel):
    """Persisted media the user removed"""

    op: Literal["delete"] = "delete"
    existing_id: str
    # Carried for the save payload, which echoes the old slot
    role: Optional[MediaRole] = None
    title: Optional[str] = None


MediaOp = Annotated[Union[KeepMedia, CreateMedia, DeleteMedia], Field(discriminator="op")]


class ReconcileRequest(BaseModel):
    persisted: List[MediaItem] = []
    working: List[MediaItem] = []


class ReconcileResponse(BaseModel):
    ops: List[MediaOp]
    kept: int
    created: int
    deleted: int
