"""Rule markers — declarative constraints attached to class members.

Fields carry a marker in their ``Annotated`` metadata::

    class Order:
        customer: Annotated[Optional[str], NotNull("Customer is required", key="customer")]
        lines: Annotated[list["OrderLine"], ComplexType()]

Properties and methods carry one as a decorator::

    class Order:
        @property
        @NotNull("Total is required")
        def total(self): ...

        @validation_method
        def check_dates(self) -> Optional[ValidationError]: ...
"""

from typing import Any, Callable, Optional, TypeVar

from pydantic import BaseModel, ConfigDict

from objvalidator.errors import RuleDeclarationError

MARKER_ATTR = "__objvalidator_rule__"

F = TypeVar("F", bound=Callable[..., Any])


class RuleMarker(BaseModel):
    """Base for every rule marker. Instances double as decorators."""

    model_config = ConfigDict(frozen=True)

    def __call__(self, func: F) -> F:
        """Attach this marker to a getter or method and return it unchanged."""
        if isinstance(func, property):
            self(func.fget)
            return func
        target = func.__func__ if isinstance(func, (staticmethod, classmethod)) else func
        existing = getattr(target, MARKER_ATTR, None)
        if existing is not None:
            raise RuleDeclarationError(
                f"{getattr(target, '__qualname__', target)!r} already carries {existing!r}; "
                "a member can have only one rule marker"
            )
        setattr(target, MARKER_ATTR, self)
        return func


class NotNull(RuleMarker):
    """Fails when the member's value is None.

    ``key`` defaults to the member's declared name.
    """

    message: str
    key: Optional[str] = None

    def __init__(self, message: Optional[str] = None, key: Optional[str] = None, **data: Any):
        if message is not None:
            data["message"] = message
        super().__init__(key=key, **data)


class ValidationMethod(RuleMarker):
    """Delegates to a zero-argument method returning ``Optional[ValidationError]``."""


class ComplexType(RuleMarker):
    """Recurse into the member's value (an object or a collection of objects)."""


def validation_method(func: F) -> F:
    """Mark a method as a custom validation rule."""
    return ValidationMethod()(func)


def complex_type(func: F) -> F:
    """Mark a property getter for recursive validation."""
    return ComplexType()(func)


def marker_of(obj: Any) -> Optional[RuleMarker]:
    """Return the marker attached to a function, if any."""
    marker = getattr(obj, MARKER_ATTR, None)
    return marker if isinstance(marker, RuleMarker) else None
