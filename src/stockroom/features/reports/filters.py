"""Turns raw report parameters into a validated ``ReportQuery``.

Everything downstream (readers, aggregation, rendering) only ever sees the
normalized form, so validation lives here and nowhere else.
"""

import dataclasses
import datetime
import enum
import re
from typing import Any, Optional

from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from ...core.errors import ValidationError

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
DEFAULT_SORT = "-created_at"
MAX_LIMIT = 100
# Row offsets must fit a signed 64-bit SQL integer
MAX_OFFSET = 2**63 - 1


class ReportKind(str, enum.Enum):
    SALES = "sales"
    ITEMS = "items"
    LEDGER = "ledger"


class ExportFormat(str, enum.Enum):
    EXCEL = "excel"
    PDF = "pdf"


_SALE_SORT_FIELDS = frozenset({"date", "quantity", "payment_type", "created_at"})

SORTABLE_FIELDS: dict[ReportKind, frozenset[str]] = {
    ReportKind.SALES: _SALE_SORT_FIELDS,
    ReportKind.LEDGER: _SALE_SORT_FIELDS,
    ReportKind.ITEMS: frozenset({"name", "quantity", "price", "created_at"}),
}

_email_adapter = TypeAdapter(EmailStr)
_camel_boundary = re.compile(r"(?<!^)(?=[A-Z])")


@dataclasses.dataclass(frozen=True)
class ReportQuery:
    kind: ReportKind
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    search: Optional[str] = None
    sort_field: str = "created_at"
    descending: bool = True
    start_date: Optional[datetime.date] = None
    end_date: Optional[datetime.date] = None
    customer_id: Optional[str] = None

    @property
    def ordering(self) -> tuple[str, str]:
        # Insertion order breaks ties so pages never overlap
        prefix = "-" if self.descending else ""
        return f"{prefix}{self.sort_field}", "id"


@dataclasses.dataclass(frozen=True)
class ExportRequest:
    query: ReportQuery
    format: ExportFormat
    email: Optional[str] = None

    @property
    def filename(self) -> str:
        extension = "xlsx" if self.format is ExportFormat.EXCEL else "pdf"
        return f"{self.query.kind.value}-report.{extension}"


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _positive_int(value: Any, name: str, default: int, maximum: int) -> int:
    if _blank(value):
        return default
    try:
        number = int(str(value).strip())
    except ValueError:
        raise ValidationError(f"{name} must be a positive integer", field=name)
    if number < 1:
        raise ValidationError(f"{name} must be a positive integer", field=name)
    if number > maximum:
        raise ValidationError(f"{name} must be at most {maximum}", field=name)
    return number


def parse_date(value: Any, name: str) -> Optional[datetime.date]:
    """Parses an ISO date (or datetime, truncated to its day). Blank means absent."""
    if _blank(value):
        return None
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    text = str(value).strip()
    try:
        return datetime.date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        raise ValidationError(f"{name} must be a valid date", field=name)


def parse_sort(kind: ReportKind, sort: Optional[str]) -> tuple[str, bool]:
    """Returns ``(field, descending)`` for a sort value like ``-date``.

    camelCase names (``createdAt``) are accepted for the snake_case fields.
    """
    raw = DEFAULT_SORT if _blank(sort) else sort.strip()
    descending = raw.startswith("-")
    field = raw.lstrip("-").strip()
    field = _camel_boundary.sub("_", field).lower()
    allowed = SORTABLE_FIELDS[kind]
    if field not in allowed:
        raise ValidationError(
            f"Cannot sort {kind.value} by '{field}'. Allowed: {', '.join(sorted(allowed))}",
            field="sort",
        )
    return field, descending


def normalize_report_query(
    kind: ReportKind | str,
    page: Any = None,
    limit: Any = None,
    search: Optional[str] = None,
    sort: Optional[str] = None,
    start_date: Any = None,
    end_date: Any = None,
    customer_id: Optional[str] = None,
) -> ReportQuery:
    """
    Builds the canonical query descriptor for one report request.

    Args:
        kind: Which report the parameters are for.
        page: 1-based page number, defaults to 1.
        limit: Page size, defaults to 10, at most 100.
        search: Case-insensitive substring matched against the report's text fields.
        sort: Field name, with a leading ``-`` for descending. Defaults to newest first.
        start_date: Inclusive lower bound (ISO date).
        end_date: Inclusive upper bound (ISO date).
        customer_id: Public ID of the customer; required for the ledger.

    Raises:
        ValidationError: for any malformed or missing parameter.
    """
    try:
        kind = ReportKind(kind)
    except ValueError:
        raise ValidationError(
            "type must be one of: " + ", ".join(k.value for k in ReportKind), field="type"
        )

    start = parse_date(start_date, "startDate")
    end = parse_date(end_date, "endDate")
    if start and end and start > end:
        raise ValidationError("startDate must not be after endDate", field="startDate")

    customer = None if _blank(customer_id) else customer_id.strip()
    if kind is ReportKind.LEDGER and customer is None:
        raise ValidationError("Customer ID is required", field="customerId")
    if kind is ReportKind.ITEMS:
        customer = None

    sort_field, descending = parse_sort(kind, sort)

    limit = _positive_int(limit, "limit", DEFAULT_LIMIT, MAX_LIMIT)
    page = _positive_int(page, "page", DEFAULT_PAGE, MAX_OFFSET // limit + 1)

    return ReportQuery(
        kind=kind,
        page=page,
        limit=limit,
        search=None if _blank(search) else search.strip(),
        sort_field=sort_field,
        descending=descending,
        start_date=start,
        end_date=end,
        customer_id=customer,
    )


def normalize_export_request(
    kind: Optional[str],
    format: Optional[str],
    customer_id: Optional[str] = None,
    start_date: Any = None,
    end_date: Any = None,
    email: Optional[str] = None,
) -> ExportRequest:
    """Validates export parameters. The ledger export requires ``customer_id``."""
    try:
        export_format = ExportFormat(format)
    except ValueError:
        raise ValidationError("format must be one of: excel, pdf", field="format")

    recipient = None
    if not _blank(email):
        try:
            recipient = str(_email_adapter.validate_python(email.strip()))
        except PydanticValidationError:
            raise ValidationError(f"'{email}' is not a valid email address", field="email")

    query = normalize_report_query(
        kind if kind is not None else "",
        start_date=start_date,
        end_date=end_date,
        customer_id=customer_id,
    )
    return ExportRequest(query=query, format=export_format, email=recipient)
