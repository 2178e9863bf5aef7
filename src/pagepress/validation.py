"""Reference validation for caller-supplied letterhead and field lists.

The rendering core assumes structurally valid input and only escapes.
Callers (the CLI here) bound lengths and check logo formats first.
"""

import re
from typing import Any, Iterable, Optional

from pagepress.errors import ValidationFault
from pagepress.models import LetterheadSpec

MAX_COMPANY_NAME = 200
MAX_ADDRESS = 500
MAX_PHONE = 50
MAX_EMAIL = 200
MAX_LOGO_DATA_URI = 10 * 1024 * 1024
MAX_LOGO_URL = 2000
MAX_HIDDEN_FIELDS = 100
MAX_FIELD_NAME = 200

LOGO_DATA_URI = re.compile(r"^data:image/(png|jpeg|jpg|gif|svg\+xml|webp);base64,", re.IGNORECASE)


def _optional_text(data: dict, key: str, alt: str, limit: int) -> Optional[str]:
    value = data.get(key, data.get(alt))
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise ValidationFault(f"{key} must be a string")
    value = value.strip()
    if len(value) > limit:
        raise ValidationFault(f"{key} is too long (max {limit} characters)")
    return value or None


def validate_logo(logo: Any) -> Optional[str]:
    """Accept a base64 image data URI or an http(s) URL."""
    if not logo:
        return None
    if not isinstance(logo, str):
        raise ValidationFault("logo must be a string")
    if logo.startswith("data:"):
        if len(logo) > MAX_LOGO_DATA_URI:
            raise ValidationFault("logo is too large (max 10MB)")
        if not LOGO_DATA_URI.match(logo):
            raise ValidationFault("invalid logo format. Supported: PNG, JPEG, GIF, SVG, WebP")
        return logo
    if logo.startswith(("http://", "https://")):
        if len(logo) > MAX_LOGO_URL:
            raise ValidationFault(f"logo URL is too long (max {MAX_LOGO_URL} characters)")
        return logo
    raise ValidationFault("logo must be a data URL or HTTP(S) URL")


def validate_letterhead(data: Any) -> LetterheadSpec:
    """Validate raw letterhead data and build a trimmed ``LetterheadSpec``.

    Raises:
        ValidationFault: on the first invalid field
    """
    if isinstance(data, LetterheadSpec):
        data = data.model_dump()
    if not isinstance(data, dict):
        raise ValidationFault("letterhead data must be an object")

    company_name = data.get("company_name", data.get("companyName"))
    if not isinstance(company_name, str) or not company_name.strip():
        raise ValidationFault("company name is required")
    company_name = company_name.strip()
    if len(company_name) > MAX_COMPANY_NAME:
        raise ValidationFault(f"company name is too long (max {MAX_COMPANY_NAME} characters)")

    return LetterheadSpec(
        company_name=company_name,
        logo=validate_logo(data.get("logo", data.get("logoUrl"))),
        address=_optional_text(data, "address", "address", MAX_ADDRESS),
        phone=_optional_text(data, "phone", "phone", MAX_PHONE),
        email=_optional_text(data, "email", "email", MAX_EMAIL),
    )


def validate_field_names(names: Any, label: str = "hidden fields") -> frozenset[str]:
    """Validate a list of property or column names to hide."""
    if names is None:
        return frozenset()
    if isinstance(names, (str, bytes)) or not isinstance(names, Iterable):
        raise ValidationFault(f"{label} must be an array")
    names = list(names)
    if len(names) > MAX_HIDDEN_FIELDS:
        raise ValidationFault(f"too many {label} (max {MAX_HIDDEN_FIELDS})")
    for name in names:
        if not isinstance(name, str):
            raise ValidationFault(f"all {label} must be strings")
        if len(name) > MAX_FIELD_NAME:
            raise ValidationFault(f"field name is too long (max {MAX_FIELD_NAME} characters)")
    return frozenset(names)
