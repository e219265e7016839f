"""
Base GST service with shared functionality.

Provides the foundation for all GST services:
- Dependency Injection: Database session injected via constructor
- Payload parsing that reports failures as ``ValidationError``
- Commits that report unique-constraint races as ``DuplicateError``
"""
from __future__ import annotations

import logging
import enum
from typing import Any, Mapping, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from gstledger.core.exceptions import DuplicateError, ValidationError

logger = logging.getLogger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)
EnumT = TypeVar("EnumT", bound=enum.Enum)


class BaseGSTService:
    """
    Base service class with shared GST functionality.

    All GST services inherit from this class to share the database session.
    """

    def __init__(self, db: Session):
        """
        Initialize the base GST service.

        Args:
            db: SQLAlchemy database session
        """
        self._db = db

    @property
    def db(self) -> Session:
        """Database session accessor."""
        return self._db

    @staticmethod
    def _parse(schema: type[SchemaT], payload: SchemaT | Mapping[str, Any], subject: str) -> SchemaT:
        """Validate ``payload`` against ``schema``; already-parsed models pass through."""
        if isinstance(payload, schema):
            return payload
        if isinstance(payload, BaseModel):
            payload = payload.model_dump(exclude_unset=True)
        try:
            return schema.model_validate(payload)
        except PydanticValidationError as exc:
            raise ValidationError.from_pydantic(exc, subject) from exc

    @staticmethod
    def _choice(enum_cls: type[EnumT], value: Any, field: str) -> EnumT:
        """Coerce a filter value to ``enum_cls``; unknown values raise ValidationError."""
        try:
            return enum_cls(value)
        except ValueError as exc:
            allowed = [member.value for member in enum_cls]
            raise ValidationError(
                f"Invalid {field}: {value}",
                errors=[{"field": field, "message": f"must be one of {allowed}"}],
            ) from exc

    def _commit_unique(self, resource: str, field: str, value: Any) -> None:
        """Commit, translating a unique-constraint violation into DuplicateError."""
        try:
            self._db.commit()
        except IntegrityError as exc:
            self._db.rollback()
            logger.warning("Integrity error committing %s %s=%r: %s", resource, field, value, exc.orig)
            raise DuplicateError(resource, field, value) from exc
