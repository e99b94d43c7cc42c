"""
Format (sale variant) endpoints
"""
from typing import Any, Dict

from fastapi import APIRouter, Body

from bookcatalog.core.exceptions import ValidationError
from bookcatalog.schemas.product import QuoteRequest, QuoteResponse, VariantError, VariantValidationResponse
from bookcatalog.services import format_rules

router = APIRouter()


@router.post("/validate", response_model=VariantValidationResponse)
async def validate_format(payload: Dict[str, Any] = Body(...)) -> VariantValidationResponse:
    """Every rule the format breaks, for per-field display"""
    try:
        variant = format_rules.parse_variant(payload)
    except ValidationError as e:
        return VariantValidationResponse(valid=False, errors=[VariantError(field=e.field, reason=e.reason)])

    errors = [VariantError(field=error.field, reason=error.reason) for error in format_rules.collect_errors(variant)]
    return VariantValidationResponse(valid=not errors, errors=errors)


@router.post("/quote", response_model=QuoteResponse)
async def quote_format(request: QuoteRequest) -> QuoteResponse:
    """Price a purchase, with the quantity clamped to what can be sold"""
    variant = format_rules.validate(request.variant)
    quantity = format_rules.clamp_quantity(request.quantity, variant)
    amount = format_rules.resolve_price(variant, quantity)
    return QuoteResponse(
        unit_price=format_rules.final_unit_price(variant),
        quantity=quantity,
        amount=amount,
        label=format_rules.format_price(amount),
    )
