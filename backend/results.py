"""Result envelopes shared by the data-access boundary and the action layer.

``QueryResult`` is what every ``queries`` function returns: it never raises,
store failures are folded into ``error``/``error_kind``. ``ActionResult`` is
the caller-facing envelope returned by every action; its validator keeps
``success`` and ``error`` mutually exclusive.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from functools import wraps
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, model_validator
from sqlalchemy.exc import IntegrityError, NoResultFound, SQLAlchemyError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ErrorKind(str, Enum):
    AUTH_REQUIRED = "auth_required"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    VALIDATION = "validation"
    INTERNAL = "internal"


@dataclass
class QueryResult(Generic[T]):
    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None

    @classmethod
    def ok(cls, data: Optional[T] = None) -> "QueryResult[T]":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str, kind: ErrorKind = ErrorKind.INTERNAL) -> "QueryResult[T]":
        return cls(success=False, error=error, error_kind=kind)

    @classmethod
    def not_found(cls, noun: str) -> "QueryResult[T]":
        return cls.fail(f"{noun} not found", ErrorKind.NOT_FOUND)


class ActionResult(BaseModel, Generic[T]):
    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    data: Optional[T] = None

    @model_validator(mode="after")
    def validate_envelope(self):
        if self.success and (self.error is not None or self.error_kind is not None):
            raise ValueError("successful results cannot carry an error")
        if not self.success and not self.error:
            raise ValueError("failed results must carry an error message")
        return self

    @classmethod
    def ok(cls, message: Optional[str] = None, data: Any = None) -> "ActionResult":
        return cls(success=True, message=message, data=data)

    @classmethod
    def fail(cls, error: str, kind: ErrorKind = ErrorKind.INTERNAL) -> "ActionResult":
        return cls(success=False, error=error, error_kind=kind)

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)


def _store_message(exc: Exception, fallback: str) -> str:
    orig = getattr(exc, "orig", None)
    text = str(orig or exc).strip()
    return text or fallback


def store_call(fallback: str):
    """Wrap a boundary function taking ``db`` first so store errors become results."""

    def decorator(fn):
        @wraps(fn)
        def wrapper(db, *args, **kwargs):
            try:
                return fn(db, *args, **kwargs)
            except NoResultFound:
                db.rollback()
                return QueryResult.fail(fallback, ErrorKind.NOT_FOUND)
            except IntegrityError as exc:
                db.rollback()
                logger.error("%s: %s", fallback, exc)
                return QueryResult.fail(_store_message(exc, fallback), ErrorKind.CONFLICT)
            except SQLAlchemyError as exc:
                db.rollback()
                logger.error("%s: %s", fallback, exc)
                return QueryResult.fail(_store_message(exc, fallback), ErrorKind.INTERNAL)

        return wrapper

    return decorator
