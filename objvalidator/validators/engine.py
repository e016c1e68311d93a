"""Validation Engine — walks an object graph and aggregates rule failures.

This is the main entry point. It asks the scanner for a type's rule table,
runs each rule through the dispatcher, recurses into ComplexType members and
merges everything into one deduplicated ValidationResult for the root.

Usage:
    result = validator.validate(order)
    if result is not None:
        # result.errors lists every distinct failing key, in discovery order
"""

import time
from typing import Any, Optional

from objvalidator.config import Settings, get_settings
from objvalidator.errors import ObjectValidationFailed, ValidatorUsageError
from objvalidator.log import get_logger
from objvalidator.validators.base import RecursionRequest
from objvalidator.validators.dispatcher import RuleDispatcher
from objvalidator.validators.models import ValidationError, ValidationResult
from objvalidator.validators.scanner import MetadataScanner


class Validator:
    """Depth-first traversal with global, first-seen-wins deduplication by key.

    Design principles:
        - Read-only: validated objects are never mutated
        - Deterministic: same graph → same errors in the same order
        - Non-polymorphic: the root is scanned as the requested type only;
          nested objects are scanned as their own runtime type
        - No state shared between calls except the metadata cache
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        scanner: Optional[MetadataScanner] = None,
        dispatcher: Optional[RuleDispatcher] = None,
    ):
        """Initialize with default collaborators or custom ones.

        Args:
            settings: Optional settings. If None, uses get_settings().
            scanner: Optional metadata scanner. If None, one is built from settings.
            dispatcher: Optional rule dispatcher. If None, uses the default handlers.
        """
        self.settings = settings or get_settings()
        self.scanner = scanner or MetadataScanner(cache=self.settings.CACHE_METADATA)
        self.dispatcher = dispatcher or RuleDispatcher()
        self.logger = get_logger(self.settings)

    def validate(self, instance: Any, as_type: Optional[type] = None) -> Optional[ValidationResult]:
        """Validate ``instance`` and everything reachable through ComplexType members.

        Args:
            instance: Root object
            as_type: Scan rule markers from this type instead of the runtime
                type. ``instance`` must be an instance of it.

        Returns:
            ValidationResult whose object is ``instance``, or None when valid
        """
        start_time = time.perf_counter()

        if as_type is None:
            as_type = type(instance)
        elif not isinstance(instance, as_type):
            raise ValidatorUsageError(
                f"Cannot validate {type(instance).__qualname__} as {as_type.__qualname__}"
            )

        visited: Optional[dict[int, Any]] = {} if self.settings.DETECT_CYCLES else None
        errors = self._collect(instance, as_type, visited)
        result = ValidationResult.build(instance, errors)

        self.logger.debug(
            "validation_complete",
            type=as_type.__qualname__,
            valid=result is None,
            total_errors=len(errors),
            keys=result.keys if result else [],
            duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
        )

        return result

    def is_valid(self, instance: Any, as_type: Optional[type] = None) -> bool:
        """True when validate() finds nothing."""
        return self.validate(instance, as_type) is None

    def ensure_valid(self, instance: Any, as_type: Optional[type] = None) -> None:
        """Raise ObjectValidationFailed when ``instance`` has validation errors."""
        result = self.validate(instance, as_type)
        if result is not None:
            raise ObjectValidationFailed(result)

    def _collect(self, instance: Any, as_type: type, visited: Optional[dict[int, Any]]) -> list[ValidationError]:
        """Errors for one object: its own rules first, then its nested objects."""
        if visited is not None:
            if id(instance) in visited:
                self.logger.debug("cycle_skipped", type=type(instance).__qualname__)
                return []
            # Hold a reference so the id cannot be reused during this call
            visited[id(instance)] = instance

        errors: list[ValidationError] = []
        pending: list[RecursionRequest] = []

        for binding in self.scanner.scan(as_type):
            outcome = self.dispatcher.dispatch(instance, binding)
            if isinstance(outcome, RecursionRequest):
                pending.append(outcome)
            elif outcome is not None:
                errors.append(outcome)

        for request in pending:
            for target in request.targets:
                if target is None:
                    continue
                errors.extend(self._collect(target, type(target), visited))

        return errors


# Module-level singleton
validator = Validator()


def validate(instance: Any, as_type: Optional[type] = None) -> Optional[ValidationResult]:
    """Validate with the module-level validator."""
    return validator.validate(instance, as_type)


def is_valid(instance: Any, as_type: Optional[type] = None) -> bool:
    return validator.is_valid(instance, as_type)


def ensure_valid(instance: Any, as_type: Optional[type] = None) -> None:
    validator.ensure_valid(instance, as_type)
