"""ComplexType handler — turns a marked member into a recursion request."""

from collections.abc import Collection, Mapping
from typing import Any, Optional

from objvalidator.validators.base import BaseRuleHandler, RecursionRequest
from objvalidator.validators.markers import ComplexType
from objvalidator.validators.scanner import RuleBinding

# Collections that are values in their own right, not sequences of objects
ATOMIC_COLLECTIONS = (str, bytes, bytearray, memoryview, Mapping)


class ComplexTypeHandler(BaseRuleHandler):
    """Never fails by itself; asks the traversal to validate the member's value.

    A None value means there is nothing to recurse into. A collection is
    expanded to its elements in iteration order.
    """

    marker_type = ComplexType

    @property
    def name(self) -> str:
        return "ComplexTypeHandler"

    def dispatch(self, instance: Any, binding: RuleBinding) -> Optional[RecursionRequest]:
        value = self._read(instance, binding)
        if value is None:
            return None
        if isinstance(value, Collection) and not isinstance(value, ATOMIC_COLLECTIONS):
            return RecursionRequest(binding=binding, targets=tuple(value))
        return RecursionRequest(binding=binding, targets=(value,))
