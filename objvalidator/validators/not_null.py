"""NotNull handler — fails when a field or property holds None."""

from typing import Any, Optional

from objvalidator.validators.base import BaseRuleHandler
from objvalidator.validators.markers import NotNull
from objvalidator.validators.models import ValidationError
from objvalidator.validators.scanner import RuleBinding


class NotNullHandler(BaseRuleHandler):
    """Reports a member whose current value is None."""

    marker_type = NotNull

    @property
    def name(self) -> str:
        return "NotNullHandler"

    def dispatch(self, instance: Any, binding: RuleBinding) -> Optional[ValidationError]:
        if self._read(instance, binding) is not None:
            return None
        marker: NotNull = binding.marker
        # Key falls back to the declared member name, verbatim; an explicit "" is kept
        key = marker.key if marker.key is not None else binding.name
        return self._error(key=key, message=marker.message)
