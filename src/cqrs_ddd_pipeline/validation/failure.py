"""ValidationFailure: one field-level problem reported by a validator."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Mapping


@dataclass(frozen=True)
class ValidationFailure:
    """A single validation failure.

    Usage::

        ValidationFailure("Email", "Email must be valid.")
    """

    property_path: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"property_path": self.property_path, "message": self.message}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ValidationFailure:
        return cls(
            property_path=str(data["property_path"]), message=str(data["message"])
        )
