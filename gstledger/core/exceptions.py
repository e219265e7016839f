"""Custom exception hierarchy for GST Ledger.

Every failure the tax core reports to its callers is a ``GSTLedgerException``
carrying a user-facing message, a stable error code, the HTTP status the API
layer should use, and structured details.

Error codes follow pattern: [CATEGORY][NUMBER]
- GST: Tax slab / tax entry / return errors (001-099)
- SYS: System errors (400-499)
"""

from __future__ import annotations

from typing import Any


class GSTLedgerException(Exception):
    """Base exception for all GST Ledger application errors.

    All custom exceptions inherit from this to enable centralized error handling.
    """

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = 400,
        details: dict[str, Any] | None = None,
    ):
        """Initialize exception with user-friendly message and metadata.

        Args:
            message: User-friendly error message
            code: Unique error code (e.g., "GST001")
            status_code: HTTP status code (default: 400 Bad Request)
            details: Optional additional context
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response format."""
        return {
            "error": {
                "message": self.message,
                "code": self.code,
                "details": self.details,
            }
        }


# ============================================================================
# GST ERRORS (GST001-099)
# ============================================================================

class ValidationError(GSTLedgerException):
    """Required field missing or value out of range. Raised before any write."""

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None):
        super().__init__(
            message=message,
            code="GST001",
            status_code=400,
            details={"errors": errors or []},
        )

    @classmethod
    def from_pydantic(cls, exc: Any, subject: str) -> ValidationError:
        """Build from a ``pydantic.ValidationError`` raised while parsing ``subject``."""
        errors = [
            {
                "field": ".".join(str(part) for part in err.get("loc", ())),
                "message": err.get("msg", "Invalid value"),
            }
            for err in exc.errors()
        ]
        fields = ", ".join(e["field"] for e in errors if e["field"]) or "payload"
        return cls(f"Invalid {subject}: check {fields}", errors=errors)


class NotFoundError(GSTLedgerException):
    """Identifier does not resolve to an existing record."""

    def __init__(self, message: str = "Record not found", details: dict[str, Any] | None = None):
        super().__init__(
            message=message,
            code="GST002",
            status_code=404,
            details=details,
        )


class TaxSlabNotFoundError(NotFoundError):
    def __init__(self, slab_id: int | None = None):
        message = "Tax slab not found" if slab_id is None else f"Tax slab {slab_id} not found"
        super().__init__(message, details={"slab_id": slab_id} if slab_id is not None else {})


class TaxEntryNotFoundError(NotFoundError):
    def __init__(self, entry_id: int | None = None):
        message = "Tax entry not found" if entry_id is None else f"Tax entry {entry_id} not found"
        super().__init__(message, details={"entry_id": entry_id} if entry_id is not None else {})


class DefaultSlabNotFoundError(NotFoundError):
    """No active tax slab exists to act as the default."""

    def __init__(self):
        super().__init__(
            "No tax slabs found. Please create at least one active tax slab.",
            details={"hint": "POST /gst/slabs or /gst/slabs/bulk-create"},
        )


class DuplicateError(GSTLedgerException):
    """A unique field (slab name, entry invoice number) collides with an existing record."""

    def __init__(self, resource: str, field: str, value: Any):
        super().__init__(
            message=f"A {resource} with this {field} already exists: {value}",
            code="GST003",
            status_code=409,
            details={"resource": resource, "field": field, "value": value},
        )


class AlreadySeededError(GSTLedgerException):
    """Bulk seeding was requested while tax slabs already exist."""

    def __init__(self, existing_count: int):
        super().__init__(
            message=(
                f"Found {existing_count} existing tax slabs. "
                "Delete them first or use individual create endpoint."
            ),
            code="GST004",
            status_code=400,
            details={"existing_count": existing_count},
        )


# ============================================================================
# SYSTEM ERRORS (SYS400-499)
# ============================================================================

class ConfigurationError(GSTLedgerException):
    """Application configuration is invalid or missing."""

    def __init__(self, parameter: str):
        message = f"Configuration error: {parameter} is not configured properly"
        super().__init__(
            message=message,
            code="SYS401",
            status_code=500,
            details={"parameter": parameter},
        )
