"""
Format (sale variant) rule engine

Pure validation and price arithmetic for product formats. Nothing here
performs I/O, so every function is safe to call on each keystroke.
"""
from decimal import Decimal
from typing import Any, Iterator, List, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from bookcatalog.core.config import settings
from bookcatalog.core.exceptions import ValidationError
from bookcatalog.schemas.product import FormatType, ProductVariant, UploadedFile
from bookcatalog.utils.normalization import parse_decimal

# Wire names used when reporting a failing field
WIRE_FIELDS = {
    "id": "id",
    "format_type": "formatType",
    "price": "price",
    "discount_price": "discountPrice",
    "stock_quantity": "stockQuantity",
    "is_available": "isAvailable",
    "file": "file",
    "file_url": "fileUrl",
    "file_type": "fileType",
    "file_size": "fileSize",
    "created_at": "createdAt",
}


def parse_variant(payload: Union[ProductVariant, dict]) -> ProductVariant:
    """Narrow a raw format payload, reporting the first bad field"""
    if isinstance(payload, ProductVariant):
        return payload
    try:
        return ProductVariant.model_validate(payload)
    except PydanticValidationError as e:
        error = e.errors()[0]
        loc = error["loc"][0] if error["loc"] else "format"
        field = WIRE_FIELDS.get(loc, loc)
        reason = error["msg"].removeprefix("Value error, ")
        raise ValidationError(str(field), reason)


def check_file(format_type: FormatType, upload: UploadedFile) -> Optional[ValidationError]:
    """Content type and size rules for a format's source file"""
    if upload.size > settings.max_format_file_bytes:
        limit_mb = settings.max_format_file_bytes / (1024 * 1024)
        return ValidationError("file", f"file must not be larger than {limit_mb:g} MB")

    content_type = (upload.content_type or "").lower()
    if format_type is FormatType.EBOOK and content_type not in settings.ebook_content_types:
        return ValidationError("file", "only PDF files are supported for e-books")
    if format_type is FormatType.AUDIOBOOK and not content_type.startswith(settings.audiobook_content_prefix):
        return ValidationError("file", "only audio files are supported for audiobooks")
    return None


def _checks(variant: ProductVariant) -> Iterator[ValidationError]:
    # 1. Format type
    if not isinstance(variant.format_type, FormatType):
        yield ValidationError("formatType", f"unknown format type '{variant.format_type}'")
        return

    # 2. Price
    if variant.price is None:
        yield ValidationError("price", "price is required")
    elif variant.price <= 0:
        yield ValidationError("price", "price must be greater than zero")

    # 3. Stock for physical books
    if variant.is_physical:
        if variant.stock_quantity is None:
            yield ValidationError("stockQuantity", "stock quantity is required for physical formats")
        elif variant.stock_quantity < 0:
            yield ValidationError("stockQuantity", "stock quantity cannot be negative")

    # 4. Source file for digital formats
    if variant.format_type.is_digital:
        has_file = variant.file is not None
        has_url = bool(variant.file_url)
        if not has_file and not has_url:
            yield ValidationError("file", f"a source file is required for {variant.format_type.value} formats")
        elif has_file and has_url:
            yield ValidationError("file", "provide either a new file or the existing file URL, not both")
        elif has_file:
            file_error = check_file(variant.format_type, variant.file)
            if file_error:
                yield file_error

    # 5. Discount
    if variant.discount_price is not None:
        if variant.discount_price <= 0:
            yield ValidationError("discountPrice", "discount price must be greater than zero")
        elif variant.price is not None and variant.discount_price >= variant.price:
            yield ValidationError("discountPrice", "discount price must be lower than the price")


def validate(variant: ProductVariant) -> ProductVariant:
    """Raise the first rule a format breaks"""
    for error in _checks(variant):
        raise error
    return variant


def collect_errors(variant: ProductVariant) -> List[ValidationError]:
    """Every rule a format breaks, in check order"""
    return list(_checks(variant))


def normalize(variant: ProductVariant) -> ProductVariant:
    """
    Strip the fields that do not apply to a format: stock is only tracked
    for physical books, source files only exist for digital ones.
    """
    if variant.is_physical:
        return variant.model_copy(update={"file": None, "file_url": None, "file_type": None, "file_size": None})
    return variant.model_copy(update={"stock_quantity": None})


def attach_file(variant: ProductVariant, upload: UploadedFile) -> ProductVariant:
    """Use a newly picked file as the format's source, replacing the old URL"""
    if variant.is_physical:
        raise ValidationError("file", "physical formats do not take a source file")
    error = check_file(variant.format_type, upload)
    if error:
        raise error
    return variant.model_copy(
        update={"file": upload, "file_url": None, "file_type": upload.content_type, "file_size": upload.size}
    )


# ----- Pricing -----

def final_unit_price(variant: ProductVariant) -> Decimal:
    if variant.price is None:
        raise ValidationError("price", "price is required")
    return variant.final_price


def _quantity(value: Any) -> int:
    """Requested quantity as a whole number; missing or below 1 counts as 1"""
    try:
        number = parse_decimal(value)
    except ValueError as e:
        raise ValidationError("quantity", str(e))
    if number is None:
        return 1
    if number != number.to_integral_value():
        raise ValidationError("quantity", f"'{value}' is not a whole number")
    return max(int(number), 1)


def resolve_price(variant: ProductVariant, quantity: Any = 1) -> Decimal:
    """Unit price after discount times quantity; quantities below 1 count as 1"""
    return final_unit_price(variant) * _quantity(quantity)


def clamp_quantity(requested: Any, variant: ProductVariant) -> int:
    """
    Bring a requested quantity into the range the format can sell.

    Physical formats are capped at the stock on hand; a physical format with
    no stock cannot be sold at all. Digital formats have no upper bound.
    """
    quantity = _quantity(requested)
    if variant.format_type.is_digital:
        return quantity

    stock = variant.stock_quantity or 0
    if stock <= 0:
        raise ValidationError("stockQuantity", "format is out of stock")
    return min(quantity, stock)


def ensure_purchasable(variant: ProductVariant, quantity: int = 1) -> ProductVariant:
    """Guard for add-to-cart and buy-now"""
    if not variant.is_available:
        raise ValidationError("isAvailable", "format is not available for sale")
    if variant.is_physical:
        stock = variant.stock_quantity or 0
        if stock <= 0:
            raise ValidationError("stockQuantity", "format is out of stock")
        if quantity > stock:
            raise ValidationError("quantity", f"not enough stock, {stock} available")
    return variant


def format_price(amount: Decimal, currency: Optional[str] = None) -> str:
    """'160000' -> '160,000 تومان'"""
    amount = Decimal(amount)
    text = f"{amount:,.0f}" if amount == amount.to_integral_value() else f"{amount:,.2f}"
    return f"{text} {currency or settings.currency_label}"
