"""Partial updates as explicit patches.

A :class:`Patch` maps backend column names to new values and holds only the
fields a caller actually supplied. The same patch is sent as the body of a
remote update and applied to local rows through :func:`merge`, so "only
supplied fields change" holds on both sides.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any

from pydantic import BaseModel


class Patch(Mapping[str, Any]):
    """Immutable mapping of column name to new value."""

    __slots__ = ("_fields",)

    def __init__(self, fields: Mapping[str, Any] | None = None, **kwargs: Any):
        data = dict(fields or {})
        data.update(kwargs)
        self._fields = {k: v for k, v in data.items() if v is not None}

    @classmethod
    def from_model(cls, update: BaseModel) -> Patch:
        """Build a patch from an ``*Update`` model.

        Only fields explicitly set on the model are included; values are
        rendered in JSON mode under their column (alias) names.
        """
        return cls(update.model_dump(mode="json", by_alias=True, exclude_unset=True))

    def __getitem__(self, key: str) -> Any:
        return self._fields[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"Patch({self._fields!r})"

    def to_dict(self) -> dict[str, Any]:
        return dict(self._fields)

    def require_fields(self) -> Patch:
        """Return self, or raise ValueError when the patch changes nothing."""
        if not self._fields:
            raise ValueError("Nothing to update: no fields were supplied")
        return self


def merge(row: Mapping[str, Any], patch: Mapping[str, Any]) -> dict[str, Any]:
    """Return a copy of ``row`` with every key of ``patch`` overwritten."""
    merged = dict(row)
    merged.update(patch)
    return merged


def merge_model(record: BaseModel, patch: Mapping[str, Any]) -> BaseModel:
    """Apply ``patch`` to a record model and re-validate the result."""
    row = record.model_dump(mode="json", by_alias=True)
    return type(record).model_validate(merge(row, patch))
