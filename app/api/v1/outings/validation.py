"""Intake rules for new outing requests. All violations are collected before raising."""

from typing import Dict

from app.core.enums import OutingType
from app.core.exceptions import ValidationError

from .schemas import OutingRequestCreate


def _blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def validate_outing_request(payload: OutingRequestCreate) -> OutingType:
    """Return the parsed outing type, or raise ValidationError with a field -> message map."""
    errors: Dict[str, str] = {}

    outing_type = None
    if _blank(payload.outing_type):
        errors["outing_type"] = "outing_type is required"
    else:
        try:
            outing_type = OutingType(payload.outing_type.strip().lower())
        except ValueError:
            errors["outing_type"] = "outing_type must be 'local' or 'hometown'"

    for field in ("destination", "reason", "from_date", "to_date"):
        if _blank(getattr(payload, field)):
            errors[field] = f"{field} is required"

    if payload.from_date and payload.to_date and payload.to_date < payload.from_date:
        errors["to_date"] = "to_date must be on or after from_date"

    if outing_type == OutingType.LOCAL:
        if payload.from_date and payload.to_date and payload.from_date != payload.to_date:
            errors["to_date"] = "A local outing must start and end on the same day"
        # to_time earlier than from_time is allowed: same-day out/in times
        if payload.from_time is None:
            errors["from_time"] = "from_time is required for a local outing"
        if payload.to_time is None:
            errors["to_time"] = "to_time is required for a local outing"
    elif outing_type == OutingType.HOMETOWN:
        if _blank(payload.contact_person):
            errors["contact_person"] = "contact_person is required for a hometown visit"
        if _blank(payload.contact_phone):
            errors["contact_phone"] = "contact_phone is required for a hometown visit"
        if payload.from_time is not None:
            errors["from_time"] = "from_time is only allowed for a local outing"
        if payload.to_time is not None:
            errors["to_time"] = "to_time is only allowed for a local outing"

    if errors:
        raise ValidationError(errors)
    return outing_type
