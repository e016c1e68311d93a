"""Rule Dispatcher — routes each discovered marker to its handler."""

from typing import Any, Optional

from objvalidator.errors import RuleInvocationError
from objvalidator.validators.base import BaseRuleHandler, DispatchOutcome
from objvalidator.validators.complex_type import ComplexTypeHandler
from objvalidator.validators.markers import RuleMarker
from objvalidator.validators.method import MethodRuleHandler
from objvalidator.validators.not_null import NotNullHandler
from objvalidator.validators.scanner import RuleBinding


class RuleDispatcher:
    """Maps marker types to handlers.

    Handlers are looked up by the exact marker type first, then by the
    nearest registered base class of the marker.
    """

    def __init__(self, handlers: Optional[list[BaseRuleHandler]] = None):
        """Initialize with default handlers or custom list.

        Args:
            handlers: Optional list of handlers. If None, uses all defaults.
        """
        self.handlers: dict[type[RuleMarker], BaseRuleHandler] = {}
        for handler in handlers or self._default_handlers():
            self.add_handler(handler)

    @staticmethod
    def _default_handlers() -> list[BaseRuleHandler]:
        return [
            NotNullHandler(),
            MethodRuleHandler(),
            ComplexTypeHandler(),
        ]

    def add_handler(self, handler: BaseRuleHandler) -> None:
        """Register a handler, replacing any handler for the same marker type."""
        self.handlers[handler.marker_type] = handler

    def handler_for(self, marker: RuleMarker) -> BaseRuleHandler:
        for marker_type in type(marker).__mro__:
            handler = self.handlers.get(marker_type)
            if handler is not None:
                return handler
        raise RuleInvocationError(f"No handler registered for {type(marker).__name__}")

    def dispatch(self, instance: Any, binding: RuleBinding) -> DispatchOutcome:
        """Execute one binding against the live instance."""
        return self.handler_for(binding.marker).dispatch(instance, binding)
