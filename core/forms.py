"""Shared parsing for request bodies that arrive as raw form strings."""
from typing import Any, Dict

from pydantic import BaseModel, field_validator


class FormModel(BaseModel):
    """Request schema base: blank strings mean "not provided".

    The UI posts every form field, so an untouched optional input shows up
    as ``""``; pydantic then parses the remaining strings ("12.5",
    "2025-01-15") into the declared types.
    """

    @field_validator("*", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


def apply_changes(instance, changes: Dict[str, Any]) -> Dict[str, Any]:
    """Copy ``changes`` onto a model instance, skipping nulls for NOT NULL columns.

    Returns the changes that were actually applied.
    """
    columns = instance.__table__.columns
    applied = {}
    for field, value in changes.items():
        if value is None and field in columns and not columns[field].nullable:
            continue
        setattr(instance, field, value)
        applied[field] = value
    return applied
