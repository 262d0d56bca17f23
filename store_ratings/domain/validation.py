from __future__ import annotations

from email_validator import EmailNotValidError, validate_email

from store_ratings.domain.errors import ValidationError
from store_ratings.infrastructure.db.models import (
    ADDRESS_MAX_LENGTH,
    NAME_MAX_LENGTH,
    NAME_MIN_LENGTH,
    RATING_MAX,
    RATING_MIN,
)


def clean_name(value: object, *, field: str = "name") -> str:
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string", field=field)
    name = value.strip()
    if not NAME_MIN_LENGTH <= len(name) <= NAME_MAX_LENGTH:
        raise ValidationError(
            f"{field} must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters",
            field=field,
        )
    return name


def clean_address(value: object, *, field: str = "address") -> str:
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string", field=field)
    address = value.strip()
    if len(address) > ADDRESS_MAX_LENGTH:
        raise ValidationError(
            f"{field} must be at most {ADDRESS_MAX_LENGTH} characters", field=field
        )
    return address


def clean_email(value: object, *, field: str = "email") -> str:
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string", field=field)
    try:
        result = validate_email(value.strip(), check_deliverability=False)
    except EmailNotValidError as exc:
        raise ValidationError(f"{field} is not a valid email address", field=field) from exc
    return result.normalized


def clean_rating(value: object) -> int:
    # bool is an int subclass; True must not count as a one-star rating
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError("rating must be a whole number", field="rating")
    if not RATING_MIN <= value <= RATING_MAX:
        raise ValidationError(
            f"rating must be between {RATING_MIN} and {RATING_MAX}", field="rating"
        )
    return value
