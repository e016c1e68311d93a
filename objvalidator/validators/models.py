"""Validation models — the error pair and the per-root result.

A result is never empty: "valid" is represented by ``None``, not by a
ValidationResult without errors.
"""

from typing import Any, Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field


class ValidationError(BaseModel):
    """A single failed constraint.

    Two errors are equal iff key and message both match.
    """

    model_config = ConfigDict(frozen=True)

    key: str = Field(description="Identifies the failed constraint; used for deduplication")
    message: str = Field(description="Human-readable description of the failure")

    def __init__(self, key: Optional[str] = None, message: Optional[str] = None, **data: Any):
        if key is not None:
            data["key"] = key
        if message is not None:
            data["message"] = message
        super().__init__(**data)

    def __str__(self) -> str:
        return f"{self.key}: {self.message}"


class ValidationResult(BaseModel):
    """All distinct failures found for one root object."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    object: Any = Field(description="The root instance passed to validate()")
    errors: list[ValidationError] = Field(min_length=1)

    @property
    def keys(self) -> list[str]:
        return [e.key for e in self.errors]

    def get(self, key: str) -> Optional[ValidationError]:
        """Return the error reported under ``key``, if any."""
        for error in self.errors:
            if error.key == key:
                return error
        return None

    def __len__(self) -> int:
        return len(self.errors)

    def to_dict(self) -> dict:
        """Serialisable form; the object is reported by type name only."""
        return {
            "object_type": type(self.object).__qualname__,
            "errors": [e.model_dump() for e in self.errors],
        }

    @classmethod
    def build(cls, obj: Any, errors: Iterable[ValidationError]) -> Optional["ValidationResult"]:
        """Build a result from collected errors, deduplicated by key.

        The first error seen for a key wins; later ones with the same key are
        dropped whatever their message. Returns None when nothing failed.
        """
        seen: set[str] = set()
        unique: list[ValidationError] = []
        for error in errors:
            if error.key in seen:
                continue
            seen.add(error.key)
            unique.append(error)

        if not unique:
            return None
        return cls(object=obj, errors=unique)
