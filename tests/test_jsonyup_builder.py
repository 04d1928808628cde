import re

import pytest
from jsonyup.jsonyup_builder import (
    yup, Yup, Schema, MixedSchema, StringSchema, NumberSchema, BooleanSchema,
    ArraySchema, ObjectSchema, ValidationError
)

# --- Root ---

@pytest.mark.parametrize(
    "ctor, expected_type",
    [("mixed", MixedSchema), ("string", StringSchema), ("number", NumberSchema),
     ("boolean", BooleanSchema), ("array", ArraySchema), ("object", ObjectSchema)]
)
def test_root_constructors(ctor, expected_type):
    schema = getattr(yup, ctor)()
    assert type(schema) is expected_type
    assert isinstance(schema, Schema)

def test_default_root_is_a_yup():
    assert isinstance(yup, Yup)

# --- Chaining ---

def test_chain_methods_return_new_schemas():
    base = yup.string()
    required = base.required()
    assert required is not base
    assert base.is_valid(None)
    assert not required.is_valid(None)

def test_equality_follows_description():
    assert yup.string().min(2) == yup.string().min(2)
    assert yup.string().min(2) != yup.string().min(3)
    assert yup.string() != yup.mixed()

def test_repeated_test_replaces_previous():
    schema = yup.string().min(2).min(5)
    assert [t["name"] for t in schema.describe()["tests"]] == ["min"]
    assert not schema.is_valid("abc")

# --- Mixed ---

def test_mixed_accepts_anything():
    for value in (1, "a", [1], {"a": 1}, object):
        assert yup.mixed().validate(value) is value

def test_required_message_and_label():
    with pytest.raises(ValidationError) as excinfo:
        yup.mixed().label("Name").required().validate(None)
    assert excinfo.value.errors == ["Name is a required field"]
    with pytest.raises(ValidationError, match="give me one"):
        yup.mixed().required("give me one").validate(None)

def test_optional_undoes_required():
    assert yup.mixed().required().optional().validate(None) is None

def test_default_fills_missing_values():
    schema = yup.array().default([])
    first = schema.validate(None)
    assert first == []
    first.append(1)
    assert schema.validate(None) == []

def test_one_of_and_not_one_of():
    assert yup.mixed().one_of(["a", "b"]).is_valid("a")
    with pytest.raises(ValidationError) as excinfo:
        yup.mixed().one_of(["a", "b"]).validate("c")
    assert excinfo.value.errors == ["this must be one of the following values: ['a', 'b']"]
    assert not yup.mixed().not_one_of([0]).is_valid(0)
    with pytest.raises(TypeError):
        yup.mixed().one_of("ab")

def test_custom_test():
    schema = yup.number().test("even", "{path} must be even", lambda v: v % 2 == 0)
    assert schema.is_valid(4)
    with pytest.raises(ValidationError, match="this must be even"):
        schema.validate(3)
    with pytest.raises(TypeError):
        yup.number().test("even", "msg", "not callable")

# --- String ---

@pytest.mark.parametrize(
    "schema, value, ok",
    [
        (yup.string().min(2), "ab", True),
        (yup.string().min(2), "a", False),
        (yup.string().max(2), "abc", False),
        (yup.string().length(3), "abc", True),
        (yup.string().matches(r"^\d+$"), "123", True),
        (yup.string().matches(re.compile(r"^\d+$")), "12a", False),
        (yup.string().email(), "ann@mail.org", True),
        (yup.string().email(), "not-an-email", False),
        (yup.string().trim().min(2), "  a  ", False),
        (yup.string(), 5, False),
    ],
)
def test_string_rules(schema, value, ok):
    assert schema.is_valid(value) is ok

def test_string_trim_returns_trimmed_value():
    assert yup.string().trim().validate("  hi ") == "hi"

def test_matches_rejects_non_patterns():
    with pytest.raises(TypeError):
        yup.string().matches(5)

def test_type_error_message():
    with pytest.raises(ValidationError) as excinfo:
        yup.string().validate(5, path="name")
    assert excinfo.value.errors == ["name: Input should be a valid string"]

# --- Number and boolean ---

@pytest.mark.parametrize(
    "schema, value, expected",
    [
        (yup.number(), "42", 42),
        (yup.number(), "1.5", 1.5),
        (yup.number().integer(), 3.0, 3.0),
        (yup.boolean(), "true", True),
        (yup.boolean(), "false", False),
    ],
)
def test_casting(schema, value, expected):
    assert schema.validate(value) == expected

@pytest.mark.parametrize(
    "schema, value",
    [
        (yup.number(), "abc"),
        (yup.number().integer(), 1.5),
        (yup.number().min(1), 0),
        (yup.number().max(1), 2),
        (yup.number().positive(), 0),
        (yup.number().negative(), 0),
        (yup.number().more_than(1), 1),
        (yup.number().less_than(1), 1),
        (yup.boolean(), "maybe"),
    ],
)
def test_number_and_boolean_rejections(schema, value):
    assert not schema.is_valid(value)

# --- Array and object ---

def test_array_validates_items_with_paths():
    schema = yup.array(yup.number().min(0)).min(1)
    assert schema.validate(["1", 2]) == [1, 2]
    with pytest.raises(ValidationError) as excinfo:
        schema.validate([1, -1, -2], path="scores")
    assert excinfo.value.errors == [
        "scores[1]: Input should be greater than or equal to 0",
        "scores[2]: Input should be greater than or equal to 0",
    ]
    assert not schema.is_valid([])

def test_array_of_and_length():
    schema = yup.array().of(yup.string()).length(2)
    assert schema.is_valid(["a", "b"])
    assert not schema.is_valid(["a", 1])
    assert not schema.is_valid(["a"])
    with pytest.raises(TypeError):
        yup.array().of("string")

def test_object_collects_field_errors():
    schema = yup.object({
        "name": yup.string().required(),
        "age": yup.number().min(18),
    })
    assert schema.validate({"name": "Al", "age": "20", "extra": 1}) == {"name": "Al", "age": 20, "extra": 1}
    with pytest.raises(ValidationError) as excinfo:
        schema.validate({"age": 3})
    assert excinfo.value.errors == [
        "name is a required field",
        "age: Input should be greater than or equal to 18",
    ]

def test_nested_object_paths():
    schema = yup.object().shape({"user": yup.object({"email": yup.string().email()})})
    with pytest.raises(ValidationError) as excinfo:
        schema.validate({"user": {"email": "nope"}})
    assert excinfo.value.errors == ["user.email must be a valid email"]

def test_shape_rejects_non_schemas():
    with pytest.raises(TypeError):
        yup.object({"a": "string"})
    with pytest.raises(TypeError):
        yup.object().shape(["a"])

def test_when_switches_between_branches():
    schema = yup.object({
        "kind": yup.string(),
        "count": yup.number().when("kind", {
            "is": "many",
            "then": yup.number().min(2),
            "otherwise": yup.number().max(1),
        }),
    })
    assert schema.is_valid({"kind": "many", "count": 5})
    assert not schema.is_valid({"kind": "many", "count": 1})
    assert schema.is_valid({"kind": "one", "count": 1})
    assert not schema.is_valid({"kind": "one", "count": 5})

def test_when_requires_is_option():
    with pytest.raises(TypeError):
        yup.string().when("kind", {"then": yup.string()})
    with pytest.raises(TypeError):
        yup.string().when("kind", {"is": 1, "then": "required"})

def test_concat_merges_rules():
    schema = yup.string().min(2).concat(yup.string().max(3).required())
    assert [t["name"] for t in schema.describe()["tests"]] == ["min", "max"]
    assert schema.describe()["required"] is True
    with pytest.raises(TypeError):
        yup.string().concat("nope")

def test_describe_object():
    desc = yup.object({"a": yup.array(yup.boolean())}).describe()
    assert desc["type"] == "object"
    assert desc["fields"]["a"]["type"] == "array"
    assert desc["fields"]["a"]["inner"]["type"] == "boolean"

def test_concat_adopts_the_more_specific_type():
    schema = yup.mixed().required().concat(yup.string().min(3))
    assert type(schema) is StringSchema
    assert schema.describe()["required"] is True
    assert schema.is_valid("abc")
    with pytest.raises(ValidationError) as excinfo:
        schema.validate(5, path="code")
    assert excinfo.value.errors == ["code: Input should be a valid string"]

def test_concat_rejects_incompatible_types():
    with pytest.raises(TypeError, match="cannot concat a number schema onto a string schema"):
        yup.string().concat(yup.number())

def test_mixed_when_branch_checks_type_before_rules():
    schema = yup.object({
        "kind": yup.string(),
        "code": yup.mixed().when("kind", {"is": "s", "then": yup.string().min(3)}),
    })
    assert schema.validate({"kind": "n", "code": 5}) == {"kind": "n", "code": 5}
    with pytest.raises(ValidationError) as excinfo:
        schema.validate({"kind": "s", "code": 5})
    assert excinfo.value.errors == ["code: Input should be a valid string"]

# --- Messages ---

def test_custom_messages_keep_unknown_braces():
    with pytest.raises(ValidationError) as excinfo:
        yup.string().required("send {} please").validate(None)
    assert excinfo.value.errors == ["send {} please"]
    with pytest.raises(ValidationError) as excinfo:
        yup.string().min(3, "{path} needs {min} chars {x}").validate("a", path="code")
    assert excinfo.value.errors == ["code needs 3 chars {x}"]

def test_custom_message_for_pydantic_constraint():
    with pytest.raises(ValidationError) as excinfo:
        yup.number().integer("{path} must be whole").validate(1.5, path="n")
    assert excinfo.value.errors == ["n must be whole"]

def test_integer_casts_to_int():
    value = yup.number().integer().validate("7")
    assert value == 7 and type(value) is int
