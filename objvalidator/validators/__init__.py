"""Object Validator — declarative, reflective validation of object graphs.

Usage:
    from objvalidator.validators import validator

    result = validator.validate(order)
    if result is not None:
        # result.errors lists every distinct failing key
"""

from objvalidator.validators.engine import Validator, validator, validate, is_valid, ensure_valid
from objvalidator.validators.markers import NotNull, ValidationMethod, ComplexType, validation_method, complex_type
from objvalidator.validators.models import ValidationError, ValidationResult

__all__ = [
    "Validator",
    "validator",
    "validate",
    "is_valid",
    "ensure_valid",
    "NotNull",
    "ValidationMethod",
    "ComplexType",
    "validation_method",
    "complex_type",
    "ValidationError",
    "ValidationResult",
]
