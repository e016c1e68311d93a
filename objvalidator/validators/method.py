"""Method rule handler — runs a custom zero-argument validation method."""

from typing import Any, Optional

from objvalidator.errors import RuleInvocationError
from objvalidator.log import get_logger
from objvalidator.validators.base import BaseRuleHandler
from objvalidator.validators.markers import ValidationMethod
from objvalidator.validators.models import ValidationError
from objvalidator.validators.scanner import RuleBinding

logger = get_logger()


class MethodRuleHandler(BaseRuleHandler):
    """Invokes the method and returns its ValidationError (or None) unmodified."""

    marker_type = ValidationMethod

    @property
    def name(self) -> str:
        return "MethodRuleHandler"

    def dispatch(self, instance: Any, binding: RuleBinding) -> Optional[ValidationError]:
        method = self._bind(instance, binding)
        try:
            outcome = method()
        except Exception as e:
            logger.error(
                "rule_method_failed",
                type=binding.owner.__qualname__,
                method=binding.name,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

        if outcome is not None and not isinstance(outcome, ValidationError):
            raise RuleInvocationError(
                f"{binding.owner.__qualname__}.{binding.name}() returned "
                f"{type(outcome).__name__}, expected ValidationError or None"
            )
        return outcome
