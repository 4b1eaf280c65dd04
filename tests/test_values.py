import pytest

from scenescript.domain.values import (
    INTEGER_MAX,
    INTEGER_MIN,
    BooleanValue,
    DivisionByZero,
    IntegerOverflow,
    IntegerValue,
    ValueOperationError,
    TextValue,
    ValueTypeMismatch,
    apply_operation,
    compare_values,
    infer_value,
    make_value,
)
from scenescript.domain.variables import VariableStore


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("42", IntegerValue(42)),
        ("-7", IntegerValue(-7)),
        ("+3", IntegerValue(3)),
        ("true", BooleanValue(True)),
        ("false", BooleanValue(False)),
        ("True", TextValue("True")),
        ("4.5", TextValue("4.5")),
        ("hello", TextValue("hello")),
    ],
)
def test_infer_value_prefers_integer_then_boolean(raw: str, expected) -> None:
    assert infer_value(raw) == expected


def test_compare_integers_supports_every_comparator() -> None:
    five = IntegerValue(5)
    three = IntegerValue(3)
    assert compare_values(five, "gt", three)
    assert compare_values(five, "ge", five)
    assert compare_values(three, "lt", five)
    assert compare_values(three, "le", three)
    assert compare_values(five, "ne", three)
    assert not compare_values(five, "eq", three)


def test_ordering_on_text_and_boolean_is_false() -> None:
    assert not compare_values(TextValue("b"), "gt", TextValue("a"))
    assert not compare_values(BooleanValue(True), "ge", BooleanValue(False))
    assert compare_values(TextValue("a"), "eq", TextValue("a"))
    assert compare_values(BooleanValue(True), "ne", BooleanValue(False))


def test_compare_mismatched_kinds_raises() -> None:
    with pytest.raises(ValueTypeMismatch):
        compare_values(IntegerValue(1), "eq", TextValue("1"))


def test_apply_operation_arithmetic() -> None:
    assert apply_operation(IntegerValue(10), "add", IntegerValue(5)) == IntegerValue(15)
    assert apply_operation(IntegerValue(10), "sub", IntegerValue(15)) == IntegerValue(-5)
    assert apply_operation(IntegerValue(4), "mul", IntegerValue(-3)) == IntegerValue(-12)


def test_division_truncates_toward_zero() -> None:
    assert apply_operation(IntegerValue(7), "div", IntegerValue(2)) == IntegerValue(3)
    assert apply_operation(IntegerValue(-7), "div", IntegerValue(2)) == IntegerValue(-3)
    assert apply_operation(IntegerValue(7), "div", IntegerValue(-2)) == IntegerValue(-3)


def test_division_by_zero_raises() -> None:
    with pytest.raises(DivisionByZero):
        apply_operation(IntegerValue(1), "div", IntegerValue(0))


def test_apply_operation_rejects_non_integers() -> None:
    with pytest.raises(ValueTypeMismatch):
        apply_operation(TextValue("x"), "add", IntegerValue(1))


@pytest.mark.parametrize("raw", [str(INTEGER_MAX + 1), str(INTEGER_MIN - 1), "1" * 5000])
def test_infer_value_rejects_integers_outside_64_bits(raw: str) -> None:
    with pytest.raises(ValueError):
        infer_value(raw)


@pytest.mark.parametrize(
    ("left", "operator", "right"),
    [
        (INTEGER_MAX, "add", 1),
        (INTEGER_MIN, "sub", 1),
        (10_000_000_000, "mul", 1_000_000_000),
        (INTEGER_MIN, "div", -1),
    ],
)
def test_apply_operation_overflow_raises(left: int, operator: str, right: int) -> None:
    with pytest.raises(IntegerOverflow) as excinfo:
        apply_operation(IntegerValue(left), operator, IntegerValue(right))
    assert isinstance(excinfo.value, ValueOperationError)


def test_make_value_validates_payload_type() -> None:
    assert make_value("integer", 3) == IntegerValue(3)
    assert make_value("boolean", False) == BooleanValue(False)
    assert make_value("text", "hi") == TextValue("hi")
    with pytest.raises(ValueError):
        make_value("integer", True)
    with pytest.raises(ValueError):
        make_value("float", 1.5)
    with pytest.raises(ValueError):
        make_value("integer", INTEGER_MAX + 1)


def test_variable_store_copy_is_independent() -> None:
    store = VariableStore({"score": IntegerValue(1)})
    clone = store.copy()
    clone.set("score", IntegerValue(2))
    assert store.get("score") == IntegerValue(1)
    assert clone.get("score") == IntegerValue(2)
    assert "score" in store
    assert store.get("missing") is None
    assert list(VariableStore({"b": IntegerValue(1), "a": IntegerValue(2)})) == ["a", "b"]
