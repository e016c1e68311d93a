"""Tests for the Validator traversal and aggregation."""

from pathlib import Path
from typing import Annotated, ClassVar, Optional

import pytest
from structlog.testing import capture_logs

from objvalidator.config import Settings
from objvalidator.errors import ObjectValidationFailed, RuleInvocationError, ValidatorUsageError
from objvalidator.validators import engine as engine_module
from objvalidator.validators.engine import Validator
from objvalidator.validators.markers import ComplexType, NotNull, complex_type, validation_method
from objvalidator.validators.models import ValidationError


class Empty:
    pass


class WithoutRules:
    value: Optional[str] = None

    def check(self) -> Optional[ValidationError]:
        raise NotImplementedError


class WithRules:
    unmarked: Optional[str] = None

    static_field: ClassVar[Annotated[Optional[str], NotNull("Static_Field", key="staticfield")]] = None
    public_field: Annotated[Optional[str], NotNull("Public_Field", key="publicfield")]
    _protected_field: Annotated[Optional[str], NotNull("Protected_Field", key="protectedfield")]
    __private_field: Annotated[Optional[str], NotNull("Private_Field", key="privatefield")]

    @property
    @NotNull("Public_Property", key="publicproperty")
    def public_property(self) -> Optional[str]:
        return None

    def unmarked_method(self) -> Optional[ValidationError]:
        raise NotImplementedError

    @staticmethod
    @validation_method
    def static_method() -> Optional[ValidationError]:
        return ValidationError("staticmethod", "Static_Method")

    @classmethod
    @validation_method
    def class_method(cls) -> Optional[ValidationError]:
        return ValidationError("classmethod", "Class_Method")

    @validation_method
    def public_method(self) -> Optional[ValidationError]:
        return ValidationError("publicmethod", "Public_Method")

    @validation_method
    def _protected_method(self) -> Optional[ValidationError]:
        return ValidationError("protectedmethod", "Protected_Method")

    @validation_method
    def __private_method(self) -> Optional[ValidationError]:
        return ValidationError("privatemethod", "Private_Method")


class Unrelated:
    """Only markers this library knows about count as rules."""

    class Tag:
        pass

    value: Annotated[Optional[str], "documentation", Tag()] = None

    def tagged(self) -> Optional[ValidationError]:
        raise NotImplementedError

    tagged.tag = Tag()


class AllValid:
    def __init__(self):
        self.value = "value"

    value: Annotated[Optional[str], NotNull("Value_Required", key="value")]

    @validation_method
    def check(self) -> Optional[ValidationError]:
        return None


class InvalidMethodSignature:
    @validation_method
    def check(self, threshold: int) -> Optional[ValidationError]:
        return ValidationError("publicmethod", "Public_Method")

    @validation_method
    def wrong_return(self) -> int:
        return 1


class WithoutKey:
    value: Annotated[Optional[str], NotNull("Value_Required")] = None
    __secret: Annotated[Optional[str], NotNull("Secret_Required")] = None


class SimilarErrors:
    value: Annotated[Optional[str], NotNull("Value_Required", key="similarError")] = None

    @validation_method
    def check(self) -> Optional[ValidationError]:
        return ValidationError("similarError", "Value_Required_Again")


class Base:
    pass


class Derived(Base):
    value: Annotated[Optional[str], NotNull("Value_Required", key="testKey")] = None


class Leaf:
    def __init__(self, first: Optional[str] = None, second: Optional[str] = None):
        self.first = first
        self.second = second

    first: Annotated[Optional[str], NotNull("Error1")]
    second: Annotated[Optional[str], NotNull("Error2")]


class WithReference:
    def __init__(self, leaf: Optional[Leaf] = None):
        self.leaf = leaf

    leaf: Annotated[Optional[Leaf], ComplexType()]


class WithCollection:
    def __init__(self, leaves: Optional[list[Leaf]] = None):
        self.leaves = leaves

    leaves: Annotated[Optional[list[Leaf]], ComplexType()]


class Scenario:
    """Static field a is missing, field b is set, method c fails."""

    a: ClassVar[Annotated[Optional[str], NotNull("A_Required", key="a")]] = None
    b: Annotated[Optional[str], NotNull("B_Required", key="b")] = "x"

    @validation_method
    def c(self) -> Optional[ValidationError]:
        return ValidationError("c", "msg")


class Node:
    def __init__(self, name: Optional[str] = None):
        self.name = name
        self.next = None

    name: Annotated[Optional[str], NotNull("Name_Required", key="name")]
    next: Annotated[Optional["Node"], ComplexType()]


class Factory:
    """Builds a fresh child on every access."""

    @property
    @complex_type
    def child(self) -> Leaf:
        return Leaf(first=None, second="ok")


class Raising:
    @validation_method
    def check(self) -> Optional[ValidationError]:
        raise RuntimeError("boom")


class BadReturn:
    @validation_method
    def check(self):
        return "not an error"


class EmptyKey:
    value: Annotated[Optional[str], NotNull("Value_Required", key="")] = None


class CalendarEntry:
    # Shares its top-level package name with a standard-library module
    __module__ = "calendar.models"

    title: Annotated[Optional[str], NotNull("Title_Required", key="title")] = None


class QuotedReturn:
    @validation_method
    def check(self) -> Optional["ValidationError"]:
        return ValidationError("k", "m")


class TestValidate:
    """Tests for Validator.validate()."""

    def test_empty_class_is_valid(self, validator):
        assert validator.validate(Empty()) is None

    def test_class_without_rules_is_valid(self, validator):
        assert validator.validate(WithoutRules()) is None

    def test_every_visibility_and_member_kind_reports(self, validator):
        instance = WithRules()

        result = validator.validate(instance)

        assert result is not None
        assert result.object is instance
        assert len(result.errors) == 10
        assert set(result.errors) == {
            ValidationError("staticfield", "Static_Field"),
            ValidationError("publicfield", "Public_Field"),
            ValidationError("protectedfield", "Protected_Field"),
            ValidationError("privatefield", "Private_Field"),
            ValidationError("publicproperty", "Public_Property"),
            ValidationError("staticmethod", "Static_Method"),
            ValidationError("classmethod", "Class_Method"),
            ValidationError("publicmethod", "Public_Method"),
            ValidationError("protectedmethod", "Protected_Method"),
            ValidationError("privatemethod", "Private_Method"),
        }

    def test_fields_then_properties_then_methods(self, validator):
        result = validator.validate(WithRules())

        assert result.keys[:5] == [
            "staticfield",
            "publicfield",
            "protectedfield",
            "privatefield",
            "publicproperty",
        ]
        assert result.keys[5:] == [
            "staticmethod",
            "classmethod",
            "publicmethod",
            "protectedmethod",
            "privatemethod",
        ]

    def test_unrelated_annotations_are_ignored(self, validator):
        assert validator.validate(Unrelated()) is None

    def test_valid_values_return_none(self, validator):
        assert validator.validate(AllValid()) is None

    def test_malformed_method_rules_are_excluded(self, validator):
        assert validator.validate(InvalidMethodSignature()) is None

    def test_member_name_is_default_key(self, validator):
        result = validator.validate(WithoutKey())

        assert result.keys == ["value", "__secret"]
        assert result.errors[0].message == "Value_Required"

    def test_empty_key_is_kept(self, validator):
        assert validator.validate(EmptyKey()).keys == [""]

    def test_user_package_named_like_standard_library_is_scanned(self, validator):
        assert validator.validate(CalendarEntry()).keys == ["title"]

    def test_quoted_return_annotation_is_a_rule(self, validator):
        assert validator.validate(QuotedReturn()).keys == ["k"]

    def test_same_key_from_two_rules_collapses(self, validator):
        result = validator.validate(SimilarErrors())

        assert len(result.errors) == 1
        assert result.errors[0] == ValidationError("similarError", "Value_Required")

    def test_scanning_as_base_type_ignores_derived_rules(self, validator):
        instance = Derived()

        assert validator.validate(instance, as_type=Base) is None
        assert validator.validate(instance).keys == ["testKey"]

    def test_as_type_must_match_instance(self, validator):
        with pytest.raises(ValidatorUsageError):
            validator.validate(Base(), as_type=Derived)

        with pytest.raises(TypeError):
            validator.validate("text", as_type=int)

    def test_referenced_object_errors_belong_to_root(self, validator):
        root = WithReference(Leaf(first=None, second="ABC"))

        result = validator.validate(root)

        assert result is not None
        assert result.object is root
        assert result.errors == [ValidationError("first", "Error1")]

    def test_none_reference_is_skipped(self, validator):
        assert validator.validate(WithReference(None)) is None

    def test_collection_errors_follow_element_order(self, validator):
        root = WithCollection([
            Leaf(first="ABC", second=None),
            Leaf(first="ABC", second="ABC"),
            Leaf(first=None, second="ABC"),
        ])

        result = validator.validate(root)

        assert result.object is root
        assert result.errors == [
            ValidationError("second", "Error2"),
            ValidationError("first", "Error1"),
        ]

    def test_none_collection_is_skipped(self, validator):
        assert validator.validate(WithCollection(None)) is None

    def test_none_elements_are_skipped(self, validator):
        assert validator.validate(WithCollection([None, Leaf("a", "b")])) is None

    def test_duplicate_keys_across_elements_collapse(self, validator):
        root = WithCollection([Leaf(first=None, second="x"), Leaf(first=None, second="y")])

        result = validator.validate(root)

        assert result.keys == ["first"]

    def test_concrete_scenario(self, validator):
        result = validator.validate(Scenario())

        assert result.keys == ["a", "c"]
        assert result.get("c") == ValidationError("c", "msg")
        assert result.get("b") is None

    def test_property_complex_type(self, validator):
        result = validator.validate(Factory())

        assert result.keys == ["first"]

    @pytest.mark.parametrize("value", [
        "str",
        [1, 2],
        ["a", "b"],
        (1.5, 2.5),
        {"key": "value"},
        42,
        None,
        Path("/"),
    ])
    def test_scalars_and_standard_library_objects_are_valid(self, validator, value):
        assert validator.validate(value) is None


class TestCycles:
    """Tests for the visited-set guard."""

    def test_cycle_terminates_with_guard(self, validator):
        first, second = Node(), Node("second")
        first.next = second
        second.next = first

        result = validator.validate(first)

        assert result.object is first
        assert result.keys == ["name"]

    def test_self_reference_terminates(self, validator):
        node = Node()
        node.next = node

        assert validator.validate(node).keys == ["name"]

    def test_shared_child_reported_once(self, validator):
        shared = Leaf(first=None, second="x")

        result = validator.validate(WithCollection([shared, shared]))

        assert result.errors == [ValidationError("first", "Error1")]

    def test_cycle_without_guard_recurses_forever(self):
        unguarded = Validator(settings=Settings(DETECT_CYCLES=False))
        node = Node()
        node.next = node

        with pytest.raises(RecursionError):
            unguarded.validate(node)


class TestFaults:
    """Rule failures are data; rule crashes are faults."""

    def test_method_exception_propagates(self, validator):
        with capture_logs() as logs:
            with pytest.raises(RuntimeError, match="boom"):
                validator.validate(Raising())

        failures = [e for e in logs if e["event"] == "rule_method_failed"]
        assert len(failures) == 1
        assert failures[0]["method"] == "check"
        assert failures[0]["error_type"] == "RuntimeError"

    def test_wrong_return_type_is_a_fault(self, validator):
        with pytest.raises(RuleInvocationError):
            validator.validate(BadReturn())


class TestConvenience:
    """Tests for is_valid(), ensure_valid() and the module-level functions."""

    def test_is_valid(self, validator):
        assert validator.is_valid(AllValid())
        assert not validator.is_valid(Scenario())

    def test_ensure_valid_raises_with_result(self, validator):
        instance = Scenario()

        with pytest.raises(ObjectValidationFailed) as exc_info:
            validator.ensure_valid(instance)

        assert exc_info.value.result.object is instance
        assert exc_info.value.result.keys == ["a", "c"]
        assert "a, c" in str(exc_info.value)

    def test_ensure_valid_passes_silently(self, validator):
        assert validator.ensure_valid(AllValid()) is None

    def test_module_level_functions(self):
        assert engine_module.validate(AllValid()) is None
        assert engine_module.is_valid(Empty())
        assert engine_module.validate(Derived(), as_type=Base) is None
        with pytest.raises(ObjectValidationFailed):
            engine_module.ensure_valid(Derived())

    def test_completion_is_logged_at_debug(self):
        validator = Validator(settings=Settings(_env_file=None, LOG_LEVEL="debug"))

        with capture_logs() as logs:
            validator.validate(Scenario())

        complete = [e for e in logs if e["event"] == "validation_complete"]
        assert len(complete) == 1
        assert complete[0]["type"] == "Scenario"
        assert complete[0]["keys"] == ["a", "c"]
        assert complete[0]["valid"] is False

    def test_default_validation_prints_nothing(self, monkeypatch, capsys):
        monkeypatch.delenv("OBJVALIDATOR_LOG_LEVEL", raising=False)
        validator = Validator(settings=Settings(_env_file=None))

        validator.validate(Scenario())
        validator.validate(Node())

        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err == ""
