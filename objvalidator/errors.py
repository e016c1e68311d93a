"""Fault types.

Validation failures are data (``ValidationError`` entries inside a
``ValidationResult``). The exceptions below are programmer errors: broken rule
declarations, rules that misbehave when invoked, or misuse of the API.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from objvalidator.validators.models import ValidationResult


class ObjValidatorFault(Exception):
    """Base class for every fault raised by objvalidator."""


class RuleDeclarationError(ObjValidatorFault):
    """A member was given more than one rule marker."""


class MetadataScanError(ObjValidatorFault):
    """The annotations of a class could not be resolved while scanning it."""

    def __init__(self, owner: type, reason: str):
        self.owner = owner
        super().__init__(f"Cannot scan rule markers of {owner.__qualname__}: {reason}")


class RuleInvocationError(ObjValidatorFault):
    """A rule could not be executed or returned something other than a ValidationError."""


class ValidatorUsageError(ObjValidatorFault, TypeError):
    """The validator was called with incompatible arguments."""


class ObjectValidationFailed(ObjValidatorFault):
    """Raised by ``ensure_valid`` when the object has validation errors."""

    def __init__(self, result: "ValidationResult"):
        self.result = result
        keys = ", ".join(result.keys)
        super().__init__(f"{type(result.object).__name__} failed validation: {keys}")
