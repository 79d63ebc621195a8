import re
from datetime import date, datetime, time, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel

from app.features.leads.exceptions import RowValidationError
from app.features.leads.models.lead_model import Lead

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# Accepted header spellings per field, after lower-casing and trimming.
# The first alias with a non-empty value wins.
FIELD_ALIASES: Dict[str, tuple] = {
    "lead_id": ("id", "leadid", "lead id"),
    "name": ("name",),
    "email": ("email",),
    "phone": ("phone",),
    "category": ("category",),
    "city": ("city",),
    "country": ("country",),
    "address_street": ("addressstreet", "address street"),
    "linkedin": ("linkedin",),
    "facebook_link": ("facebooklink", "facebook link"),
    "website_link": ("websitelink", "website link"),
    "google_map_link": ("googlemaplink", "google map link"),
    "instagram": ("instagram",),
    "last_verified_at": ("lastverifiedat", "last verified at"),
}

OPTIONAL_TEXT_FIELDS = (
    "phone",
    "category",
    "city",
    "country",
    "address_street",
    "linkedin",
    "facebook_link",
    "website_link",
    "google_map_link",
    "instagram",
)

DATE_FORMATS = (
    "%Y-%m-%d",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S",
    "%m/%d/%Y",
    "%d/%m/%Y",
)


class LeadRow(BaseModel):
    """A validated spreadsheet row, ready to be sequenced and inserted."""
    row_number: int
    lead_id: str
    name: str
    email: str
    phone: Optional[str] = None
    category: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    address_street: Optional[str] = None
    linkedin: Optional[str] = None
    facebook_link: Optional[str] = None
    website_link: Optional[str] = None
    google_map_link: Optional[str] = None
    instagram: Optional[str] = None
    last_verified_at: Optional[datetime] = None

    def to_record(self, upload_sequence: int) -> Dict[str, Any]:
        record = self.model_dump(exclude={"row_number"})
        record["upload_sequence"] = upload_sequence
        return record


def normalize_row(row: Dict[str, Any]) -> Dict[str, Any]:
    """Lower-case and trim header keys, trim string values."""
    normalized = {}
    for key, value in row.items():
        normalized_key = str(key).lower().strip()
        normalized[normalized_key] = value.strip() if isinstance(value, str) else value
    return normalized


def _present(value: Any) -> bool:
    return value is not None and value != ""


def resolve_field(row: Dict[str, Any], field: str) -> Any:
    for alias in FIELD_ALIASES[field]:
        value = row.get(alias)
        if _present(value):
            return value
    return None


def _to_text(value: Any) -> Optional[str]:
    if not _present(value):
        return None
    # Excel stores whole numbers as floats; 1042.0 should read as "1042"
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    return text or None


def parse_verified_date(value: Any) -> Optional[datetime]:
    """Best effort; anything unparseable is treated as absent."""
    if not _present(value):
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    else:
        raw = str(value).strip()
        parsed = None
        for fmt in DATE_FORMATS:
            try:
                parsed = datetime.strptime(raw, fmt)
                break
            except ValueError:
                continue
        if parsed is None:
            try:
                parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
            except ValueError:
                return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _max_length(field: str) -> Optional[int]:
    return getattr(Lead.__table__.c[field].type, "length", None)


def _check_length(row_number: int, field: str, value: Optional[str]) -> None:
    limit = _max_length(field)
    if value is not None and limit is not None and len(value) > limit:
        label = field.replace("_", " ").capitalize()
        raise RowValidationError(row_number, f"{label} is too long (max {limit} characters)")


def validate_row(row: Dict[str, Any], row_number: int) -> Optional[LeadRow]:
    """
    Turn a raw parsed row into a LeadRow.

    row_number is the row's number in the sheet and is used as is in
    error messages.

    Returns None for a blank row. Raises RowValidationError for a row that
    has to be rejected, with the reason in the message.
    """
    normalized = normalize_row(row)

    lead_id = _to_text(resolve_field(normalized, "lead_id"))
    name = _to_text(resolve_field(normalized, "name"))
    email = _to_text(resolve_field(normalized, "email"))

    if not lead_id and not name and not email:
        return None

    if not lead_id:
        raise RowValidationError(row_number, "Missing Lead ID (column: id or leadId)")
    if not name:
        raise RowValidationError(row_number, "Missing Name")
    if not email:
        raise RowValidationError(row_number, "Missing Email")
    if not EMAIL_PATTERN.match(email):
        raise RowValidationError(row_number, f"Invalid email format: {email}")

    optional = {field: _to_text(resolve_field(normalized, field)) for field in OPTIONAL_TEXT_FIELDS}

    for field, value in [("lead_id", lead_id), ("name", name), ("email", email), *optional.items()]:
        _check_length(row_number, field, value)

    return LeadRow(
        row_number=row_number,
        lead_id=lead_id,
        name=name,
        email=email.lower(),
        last_verified_at=parse_verified_date(resolve_field(normalized, "last_verified_at")),
        **optional,
    )
