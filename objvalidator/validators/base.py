"""Base rule handler — abstract class implementing the Strategy Pattern.

Each handler executes one kind of rule marker and is independently testable.
New marker kinds are supported by registering a handler with the dispatcher,
without modifying the engine.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Union

from objvalidator.validators.markers import RuleMarker
from objvalidator.validators.models import ValidationError
from objvalidator.validators.scanner import MemberKind, RuleBinding


@dataclass(frozen=True)
class RecursionRequest:
    """Objects the traversal should validate next, in order."""

    binding: RuleBinding
    targets: tuple[Any, ...]


DispatchOutcome = Union[ValidationError, RecursionRequest, None]


class BaseRuleHandler(ABC):
    """Abstract base for all rule handlers.

    Contract:
        - dispatch() only reads from the instance, never mutates it
        - dispatch() returns a ValidationError, a RecursionRequest or None
        - Exceptions raised by user code (getters, rule methods) propagate
    """

    marker_type: type[RuleMarker]

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name for logging."""
        ...

    @abstractmethod
    def dispatch(self, instance: Any, binding: RuleBinding) -> DispatchOutcome:
        """Execute the rule bound to one member of ``instance``.

        Args:
            instance: The live object being validated
            binding: Member and marker discovered by the scanner

        Returns:
            A failure, a recursion request, or None when the rule passed
        """
        ...

    # ── Helper Methods ──

    def _error(self, key: str, message: str) -> ValidationError:
        """Convenience method to create a ValidationError."""
        return ValidationError(key=key, message=message)

    def _read(self, instance: Any, binding: RuleBinding) -> Any:
        """Current value of a field or property; a missing attribute reads as None."""
        if binding.kind is MemberKind.CLASS_FIELD:
            return getattr(binding.owner, binding.attr_name, None)
        if binding.kind is MemberKind.FIELD:
            return getattr(instance, binding.attr_name, None)
        # Go through the scanned class's descriptor, not the runtime type's
        return binding.attribute.__get__(instance, type(instance))

    def _bind(self, instance: Any, binding: RuleBinding) -> Any:
        """Bind a method (plain, static or class) declared on the scanned class."""
        return binding.attribute.__get__(instance, type(instance))
