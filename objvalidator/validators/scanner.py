"""Metadata Scanner — enumerates the rule-bearing members declared on a type.

Scanning is non-polymorphic: only members declared directly on the requested
class are considered, never inherited ones. Every visibility level is
included (public, ``_protected`` and name-mangled ``__private``), as are
class-level members.
"""

import inspect
import os
import sys
import sysconfig
import types
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Annotated, Any, ClassVar, Optional, Union, get_args, get_origin, get_type_hints

from objvalidator.errors import MetadataScanError
from objvalidator.log import get_logger
from objvalidator.validators.markers import ComplexType, NotNull, RuleMarker, ValidationMethod, marker_of
from objvalidator.validators.models import ValidationError

logger = get_logger()

# Builtin leaf types; anything from the standard library is opaque as well
SCALAR_TYPES = frozenset({
    str, bytes, bytearray, memoryview,
    int, float, complex, bool, type(None),
    list, tuple, set, frozenset, dict,
    range, slice, type, object,
})

# Markers that make sense on a value-bearing member (field or property)
VALUE_MARKERS = (NotNull, ComplexType)

# An unresolvable string annotation mentioning one of these may hide a rule
MARKER_NAMES = ("Annotated", "NotNull", "ComplexType")


class MemberKind(str, Enum):
    """Where a rule-bearing member lives."""

    FIELD = "field"              # Annotated instance attribute
    CLASS_FIELD = "class_field"  # Annotated ClassVar
    PROPERTY = "property"
    METHOD = "method"            # Plain, static or class method


@dataclass(frozen=True)
class RuleBinding:
    """One (member, marker) pair discovered on a type."""

    name: str                # Declared name, used as the default error key
    attr_name: str           # Name to look the member up by (mangled for __private)
    kind: MemberKind
    marker: RuleMarker
    owner: type              # The scanned class
    attribute: Any = None    # Raw class-dict object for properties and methods


def _stdlib_roots() -> tuple[str, ...]:
    paths = sysconfig.get_paths()
    return tuple({os.path.realpath(paths["stdlib"]), os.path.realpath(paths["platstdlib"])})


@lru_cache(maxsize=None)
def is_stdlib_module(name: str) -> bool:
    """True when ``name`` is a loaded module shipped with the interpreter.

    Decided by where the module was loaded from, not by its name, so a user
    package called ``calendar`` or ``email`` is still scanned.
    """
    if name == "builtins" or name in sys.builtin_module_names:
        return True
    module = sys.modules.get(name)
    if module is None:
        return False
    module_spec = getattr(module, "__spec__", None)
    if module_spec is not None and module_spec.origin in ("built-in", "frozen"):
        return True
    path = getattr(module, "__file__", None)
    if not path:
        return False
    path = os.path.realpath(path)
    parts = path.split(os.sep)
    if "site-packages" in parts or "dist-packages" in parts:
        return False
    return any(path.startswith(root + os.sep) for root in _stdlib_roots())


def is_scalar_type(tp: type) -> bool:
    """True for types that are treated as opaque leaves and never scanned."""
    if tp in SCALAR_TYPES:
        return True
    if isinstance(tp, type) and issubclass(tp, Enum):
        return True
    return is_stdlib_module(getattr(tp, "__module__", None) or "")


def declared_name(owner: type, attr_name: str) -> str:
    """Undo private name mangling: ``_Order__secret`` -> ``__secret``."""
    prefix = f"_{owner.__name__.lstrip('_')}__"
    if attr_name.startswith(prefix) and not attr_name.endswith("__"):
        return attr_name[len(prefix) - 2:]
    return attr_name


class MetadataScanner:
    """Builds the per-type rule table.

    The table for a type never changes at runtime, so it is cached after the
    first scan unless caching is disabled.
    """

    def __init__(self, cache: bool = True):
        self.cache_enabled = cache
        self._cache: dict[type, tuple[RuleBinding, ...]] = {}

    def scan(self, cls: type) -> tuple[RuleBinding, ...]:
        """Return the rule bindings declared directly on ``cls``.

        Order: annotated fields (annotation order), then properties, then
        methods (both in class-body order).
        """
        if self.cache_enabled:
            cached = self._cache.get(cls)
            if cached is not None:
                return cached

        bindings = () if is_scalar_type(cls) else self._scan(cls)

        if self.cache_enabled:
            self._cache[cls] = bindings
        return bindings

    def clear_cache(self) -> None:
        self._cache.clear()

    # ── Scanning ──

    def _scan(self, cls: type) -> tuple[RuleBinding, ...]:
        namespace = vars(cls)
        fields: list[RuleBinding] = []
        properties: list[RuleBinding] = []
        methods: list[RuleBinding] = []

        for attr_name, annotation in self._own_annotations(cls).items():
            if isinstance(namespace.get(attr_name), (property, staticmethod, classmethod, types.FunctionType)):
                continue
            marker, is_class_var = self._field_marker(annotation)
            if marker is None:
                continue
            fields.append(RuleBinding(
                name=declared_name(cls, attr_name),
                attr_name=attr_name,
                kind=MemberKind.CLASS_FIELD if is_class_var else MemberKind.FIELD,
                marker=marker,
                owner=cls,
            ))

        for attr_name, raw in namespace.items():
            if isinstance(raw, property):
                marker = marker_of(raw.fget)
                if isinstance(marker, VALUE_MARKERS):
                    properties.append(RuleBinding(
                        name=declared_name(cls, attr_name),
                        attr_name=attr_name,
                        kind=MemberKind.PROPERTY,
                        marker=marker,
                        owner=cls,
                        attribute=raw,
                    ))
            elif isinstance(raw, (staticmethod, classmethod, types.FunctionType)):
                func = raw.__func__ if isinstance(raw, (staticmethod, classmethod)) else raw
                marker = marker_of(func)
                if not isinstance(marker, ValidationMethod):
                    continue
                if not self._is_rule_signature(cls, raw, func):
                    logger.debug("method_rule_excluded", type=cls.__qualname__, method=attr_name)
                    continue
                methods.append(RuleBinding(
                    name=declared_name(cls, attr_name),
                    attr_name=attr_name,
                    kind=MemberKind.METHOD,
                    marker=marker,
                    owner=cls,
                    attribute=raw,
                ))

        bindings = tuple(fields + properties + methods)
        logger.debug("metadata_scanned", type=cls.__qualname__, rules=len(bindings))
        return bindings

    @staticmethod
    def _own_annotations(cls: type) -> dict[str, Any]:
        """Annotations declared on ``cls`` itself.

        String annotations are resolved one at a time against the class's
        module. One that cannot be resolved (e.g. a name imported only under
        TYPE_CHECKING) is skipped, unless its text could carry a marker.
        """
        module = sys.modules.get(cls.__module__)
        globalns = vars(module) if module is not None else {}
        localns = dict(vars(cls))

        resolved: dict[str, Any] = {}
        for attr_name, annotation in inspect.get_annotations(cls).items():
            if not isinstance(annotation, str):
                resolved[attr_name] = annotation
                continue
            try:
                resolved[attr_name] = eval(annotation, globalns, localns)
            except (NameError, AttributeError, SyntaxError, TypeError) as e:
                if any(name in annotation for name in MARKER_NAMES):
                    raise MetadataScanError(cls, f"annotation of {attr_name}: {e}") from e
                logger.debug("annotation_unresolved", type=cls.__qualname__, member=attr_name, error=str(e))
        return resolved

    @staticmethod
    def _field_marker(annotation: Any) -> tuple[Optional[RuleMarker], bool]:
        """Find the first value marker in an annotation, unwrapping ClassVar/Annotated."""
        marker = None
        is_class_var = False
        tp = annotation
        while True:
            origin = get_origin(tp)
            if origin is ClassVar:
                is_class_var = True
            elif origin is Annotated:
                if marker is None:
                    marker = next((m for m in tp.__metadata__ if isinstance(m, VALUE_MARKERS)), None)
            else:
                return marker, is_class_var
            args = get_args(tp)
            if not args:
                return marker, is_class_var
            tp = args[0]

    @staticmethod
    def _is_rule_signature(owner: type, raw: Any, func: Any) -> bool:
        """Check for ``() -> Optional[ValidationError]`` once the receiver is bound."""
        try:
            params = list(inspect.signature(func).parameters.values())
        except (TypeError, ValueError):
            return False

        if not isinstance(raw, staticmethod):
            # Drop self / cls
            if not params or params[0].kind not in (
                inspect.Parameter.POSITIONAL_ONLY,
                inspect.Parameter.POSITIONAL_OR_KEYWORD,
            ):
                return False
            params = params[1:]
        if params:
            return False

        if "return" not in inspect.get_annotations(func):
            return True
        # get_type_hints also resolves forward references nested in Optional[...]
        try:
            hints = get_type_hints(func)
        except (NameError, AttributeError, SyntaxError, TypeError) as e:
            raise MetadataScanError(owner, f"return annotation of {func.__qualname__}: {e}") from e
        return _is_validation_error_hint(hints["return"])


def _is_validation_error_hint(hint: Any) -> bool:
    if isinstance(hint, type):
        return issubclass(hint, ValidationError)
    if get_origin(hint) in (Union, types.UnionType):
        members = [a for a in get_args(hint) if a is not type(None)]
        return bool(members) and all(isinstance(a, type) and issubclass(a, ValidationError) for a in members)
    return False
