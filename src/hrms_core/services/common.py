"""Helpers shared by the service classes."""

from __future__ import annotations

from dataclasses import asdict
from enum import Enum
from typing import Any, TypeVar

from hrms_core.exceptions import ValidationError

E = TypeVar("E", bound=Enum)


def require(value: Any, message: str) -> None:
    """Raise ValidationError when a required value is missing or blank."""
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(message)


def enum_value(enum_cls: type[E], value: Any, label: str) -> str:
    """Normalize a value to the string of an enum member, validating it."""
    if isinstance(value, enum_cls):
        return value.value
    try:
        return enum_cls(str(value).upper()).value
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"Invalid {label} '{value}'. Allowed: {allowed}") from None


def apply_fields(entity: Any, data: Any, exclude: tuple[str, ...] = ()) -> None:
    """Copy every field of a dataclass onto an entity."""
    for name, value in asdict(data).items():
        if name not in exclude:
            setattr(entity, name, value)
