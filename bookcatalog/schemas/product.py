"""
Product format (sale variant) schemas
"""

from decimal import Decimal
from enum import Enum
from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from bookcatalog.utils.normalization import blank_to_none, camelize_keys, parse_decimal


class FormatType(str, Enum):
    """Media a product is sold in"""

    PHYSICAL = "physical"
    EBOOK = "ebook"
    AUDIOBOOK = "audiobook"

    @property
    def is_digital(self) -> bool:
        return self is not FormatType.PHYSICAL

    @classmethod
    def parse(cls, value: Any) -> "FormatType":
        """Case-insensitive narrowing of the free string the service sends"""
        if isinstance(value, cls):
            return value
        normalized = str(value or "").strip().lower()
        for member in cls:
            if member.value == normalized:
                return member
        raise ValueError(f"unknown format type '{value}'")


class UploadedFile(BaseModel):
    """A file picked by the user that has not been uploaded yet"""

    filename: str
    content_type: str = Field(default="application/octet-stream", validation_alias=AliasChoices("contentType", "content_type"))
    size: int = Field(default=0, ge=0)
    content: Optional[bytes] = Field(default=None, exclude=True, repr=False)

    model_config = ConfigDict(populate_by_name=True)


class ProductVariant(BaseModel):
    """
    One purchasable format of a product.

    Numbers may arrive as strings; empty strings are treated as missing so
    the rule engine can report which required field is absent.
    """

    id: Optional[str] = None
    format_type: FormatType = Field(validation_alias=AliasChoices("formatType", "format_type"))
    price: Optional[Decimal] = None
    discount_price: Optional[Decimal] = Field(
        default=None, validation_alias=AliasChoices("discountPrice", "discountedPrice", "discount_price")
    )
    stock_quantity: Optional[int] = Field(
        default=None, validation_alias=AliasChoices("stockQuantity", "stock_quantity")
    )
    is_available: bool = Field(default=True, validation_alias=AliasChoices("isAvailable", "is_available"))
    file: Optional[UploadedFile] = None
    file_url: Optional[str] = Field(default=None, validation_alias=AliasChoices("fileUrl", "file_url"))
    file_type: Optional[str] = Field(default=None, validation_alias=AliasChoices("fileType", "file_type"))
    file_size: Optional[int] = Field(default=None, validation_alias=AliasChoices("fileSize", "file_size"))
    created_at: Optional[str] = Field(default=None, validation_alias=AliasChoices("createdAt", "created_at"))

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def _accept_pascal_case(cls, data: Any) -> Any:
        return camelize_keys(data)

    @field_validator("id", "file_url", "file_type", "created_at", mode="before")
    @classmethod
    def _optional_text(cls, value: Any) -> Any:
        value = blank_to_none(value)
        return None if value is None else str(value).strip()

    @field_validator("format_type", mode="before")
    @classmethod
    def _narrow_format_type(cls, value: Any) -> FormatType:
        return FormatType.parse(value)

    @field_validator("price", "discount_price", mode="before")
    @classmethod
    def _coerce_amount(cls, value: Any) -> Optional[Decimal]:
        return parse_decimal(value)

    @field_validator("stock_quantity", "file_size", mode="before")
    @classmethod
    def _coerce_count(cls, value: Any) -> Optional[int]:
        number = parse_decimal(value)
        if number is None:
            return None
        if number != number.to_integral_value():
            raise ValueError(f"'{value}' is not a whole number")
        return int(number)

    @field_validator("is_available", mode="before")
    @classmethod
    def _coerce_flag(cls, value: Any) -> Any:
        if value is None:
            return True
        if isinstance(value, str):
            return value.strip().lower() in ("true", "1", "yes")
        return value

    @property
    def is_physical(self) -> bool:
        return self.format_type is FormatType.PHYSICAL

    @property
    def final_price(self) -> Optional[Decimal]:
        """Discount price when it is a real discount, otherwise the list price"""
        if self.price is None:
            return None
        if self.discount_price is not None and 0 < self.discount_price < self.price:
            return self.discount_price
        return self.price


class VariantError(BaseModel):
    field: str
    reason: str


class VariantValidationResponse(BaseModel):
    valid: bool
    errors: List[VariantError] = []


class QuoteRequest(BaseModel):
    variant: ProductVariant
    quantity: int = 1


class QuoteResponse(BaseModel):
    unit_price: Decimal
    quantity: int
    amount: Decimal
    label: str
