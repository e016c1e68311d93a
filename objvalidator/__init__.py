"""objvalidator — attach validation rules to class members and check object graphs.

Example:
    from typing import Annotated, Optional
    from objvalidator import NotNull, ValidationError, validate, validation_method

    class Customer:
        name: Annotated[Optional[str], NotNull("Name is required", key="name")]

        @validation_method
        def check_email(self) -> Optional[ValidationError]:
            ...

    result = validate(customer)   # None when valid
"""

from objvalidator.errors import (
    ObjValidatorFault,
    RuleDeclarationError,
    MetadataScanError,
    RuleInvocationError,
    ValidatorUsageError,
    ObjectValidationFailed,
)
from objvalidator.validators import (
    Validator,
    validator,
    validate,
    is_valid,
    ensure_valid,
    NotNull,
    ValidationMethod,
    ComplexType,
    validation_method,
    complex_type,
    ValidationError,
    ValidationResult,
)

__version__ = "1.0.0"

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
    "ObjValidatorFault",
    "RuleDeclarationError",
    "MetadataScanError",
    "RuleInvocationError",
    "ValidatorUsageError",
    "ObjectValidationFailed",
]
