"""
A small chainable validation-schema builder, the default root for jsonyup.

Schemas are immutable: every chain method returns a new schema, so a
partially built schema can be shared and extended safely. Type checks,
casting and constraints are delegated to pydantic: each schema compiles to an
``Annotated[...]`` type validated through a ``TypeAdapter`` in lax mode.

    >>> yup.string().min(2).required().validate("ok")
    'ok'
"""

import copy
import re
from typing import Annotated, Any, Callable, Dict, List, Optional

import pydantic
from pydantic import AfterValidator, ConfigDict, Field, StringConstraints, TypeAdapter
from pydantic.networks import validate_email
from pydantic_core import PydanticCustomError

_MISSING = object()

_ADAPTER_CONFIG = ConfigDict(regex_engine="python-re")

# pydantic error types -> names of the tests that produce them
_ERROR_TESTS = {
    "string_too_short": ("min", "length"),
    "string_too_long": ("max", "length"),
    "too_short": ("min", "length"),
    "too_long": ("max", "length"),
    "string_pattern_mismatch": ("matches",),
    "greater_than_equal": ("min",),
    "less_than_equal": ("max",),
    "greater_than": ("more_than",),
    "less_than": ("less_than",),
    "int_from_float": ("integer",),
    "value_error": ("email",),
}


def _render(message: str, path: str, params: Dict[str, Any]) -> str:
    # Only known placeholders are substituted; other braces stay literal.
    text = message.replace("{path}", str(path))
    for key, value in params.items():
        text = text.replace("{" + key + "}", str(value))
    return text


def _predicate_validator(name: str, predicate: Callable):
    def check(value):
        if not predicate(value):
            raise PydanticCustomError(name, "failed the '{test}' test", {"test": name})
        return value
    return AfterValidator(check)


def _email_validator(value):
    validate_email(value)
    return value


class ValidationError(ValueError):
    """Raised by `Schema.validate` with every failure message collected."""
    def __init__(self, errors: List[str], value: Any = None):
        super().__init__("; ".join(errors))
        self.errors = list(errors)
        self.value = value


class Schema:
    """Base schema; accepts any value. Exposed as ``mixed()``."""

    type_name = "mixed"

    def __init__(self):
        self._label: Optional[str] = None
        self._required = False
        self._required_message: Optional[str] = None
        self._default: Any = _MISSING
        # (name, params, message, pydantic metadata)
        self._tests: List[tuple] = []
        self._conditions: List[tuple] = []
        self._adapter = None

    def _clone(self):
        clone = copy.copy(self)
        clone._tests = list(self._tests)
        clone._conditions = list(self._conditions)
        clone._adapter = None
        return clone

    def _with_test(self, name: str, params: Dict[str, Any], message: Optional[str], *metadata):
        clone = self._clone()
        # A test of the same name replaces the previous one (e.g. min(2).min(3)).
        clone._tests = [t for t in clone._tests if t[0] != name]
        clone._tests.append((name, params, message, metadata))
        return clone

    # --- Chain methods ---

    def required(self, message: Optional[str] = None):
        clone = self._clone()
        clone._required = True
        clone._required_message = message
        return clone

    def optional(self):
        clone = self._clone()
        clone._required = False
        clone._required_message = None
        return clone

    def default(self, value):
        clone = self._clone()
        clone._default = value
        return clone

    def label(self, text: str):
        clone = self._clone()
        clone._label = text
        return clone

    def one_of(self, values, message: Optional[str] = None):
        if not isinstance(values, (list, tuple)):
            raise TypeError("one_of expects a list of allowed values")
        allowed = list(values)
        return self._with_test(
            "one_of", {"values": allowed},
            message or "{path} must be one of the following values: {values}",
            _predicate_validator("one_of", lambda v: v in allowed),
        )

    def not_one_of(self, values, message: Optional[str] = None):
        if not isinstance(values, (list, tuple)):
            raise TypeError("not_one_of expects a list of forbidden values")
        forbidden = list(values)
        return self._with_test(
            "not_one_of", {"values": forbidden},
            message or "{path} must not be one of the following values: {values}",
            _predicate_validator("not_one_of", lambda v: v not in forbidden),
        )

    def test(self, name: str, message: str, predicate: Callable):
        if not callable(predicate):
            raise TypeError("test expects a callable predicate")
        return self._with_test(name, {}, message, _predicate_validator(name, predicate))

    def when(self, key: str, options: Dict[str, Any]):
        """Apply `then` or `otherwise` depending on a sibling field's value.

        `options` is a dict with ``is`` (the value to compare the sibling
        against), and optional ``then`` / ``otherwise`` schemas.
        """
        if not isinstance(options, dict) or "is" not in options:
            raise TypeError("when expects an options dict with an 'is' key")
        for branch in ("then", "otherwise"):
            if options.get(branch) is not None and not isinstance(options[branch], Schema):
                raise TypeError(f"when '{branch}' must be a schema")
        clone = self._clone()
        clone._conditions.append((key, options))
        return clone

    def concat(self, other: "Schema"):
        """Merge `other`'s rules into this schema.

        A mixed schema takes on the type of a more specific `other`; two
        different specific types cannot be combined.
        """
        if not isinstance(other, Schema):
            raise TypeError("concat expects a schema")
        if type(other) is type(self) or isinstance(other, MixedSchema):
            clone = self._clone()
        elif isinstance(self, MixedSchema):
            clone = other._clone()
        else:
            raise TypeError(f"cannot concat a {other.type_name} schema onto a {self.type_name} schema")
        names = {t[0] for t in other._tests}
        clone._tests = [t for t in self._tests if t[0] not in names] + list(other._tests)
        clone._conditions = self._conditions + other._conditions
        clone._required = self._required or other._required
        clone._required_message = other._required_message if other._required else self._required_message
        clone._default = other._default if other._default is not _MISSING else self._default
        clone._label = other._label if other._label is not None else self._label
        return clone

    # --- Validation ---

    def _resolve(self, context):
        schema = self
        for key, options in self._conditions:
            actual = (context or {}).get(key)
            branch = options.get("then") if actual == options["is"] else options.get("otherwise")
            if branch is not None:
                schema = schema.concat(branch)
        return schema

    def _base_type(self):
        return Any

    def _type_adapter(self) -> TypeAdapter:
        if self._adapter is None:
            metadata = [m for t in self._tests for m in t[3]]
            annotation = Annotated[(self._base_type(), *metadata)] if metadata else self._base_type()
            self._adapter = TypeAdapter(annotation, config=_ADAPTER_CONFIG)
        return self._adapter

    def _translate(self, error: pydantic.ValidationError, name: str) -> List[str]:
        tests = {t[0]: t for t in self._tests}
        messages = []
        for err in error.errors():
            candidates = (err["type"],) + _ERROR_TESTS.get(err["type"], ())
            test = next((tests[c] for c in candidates if c in tests), None)
            if test is not None and test[2]:
                messages.append(_render(test[2], name, test[1]))
            else:
                messages.append(f"{name}: {err['msg']}")
        return messages

    def _validate_inner(self, value, path, errors):
        return value

    def validate(self, value, context: Optional[dict] = None, path: Optional[str] = None):
        """Return `value` cast to this schema's type, or raise ValidationError."""
        schema = self._resolve(context)
        name = schema._label or path or "this"

        if value is None and schema._default is not _MISSING:
            value = copy.deepcopy(schema._default)
        if value is None:
            if schema._required:
                message = schema._required_message or "{path} is a required field"
                raise ValidationError([_render(message, name, {})])
            return None

        try:
            value = schema._type_adapter().validate_python(value)
        except pydantic.ValidationError as e:
            raise ValidationError(schema._translate(e, name), value) from e

        errors = []
        value = schema._validate_inner(value, path, errors)
        if errors:
            raise ValidationError(errors, value)
        return value

    def is_valid(self, value, context: Optional[dict] = None) -> bool:
        try:
            self.validate(value, context)
        except ValidationError:
            return False
        return True

    def describe(self) -> Dict[str, Any]:
        desc = {
            "type": self.type_name,
            "label": self._label,
            "required": self._required,
            "tests": [{"name": t[0], "params": t[1]} for t in self._tests],
        }
        if self._default is not _MISSING:
            desc["default"] = self._default
        if self._conditions:
            desc["conditions"] = [
                {"key": key, "is": opts["is"],
                 "then": opts["then"].describe() if opts.get("then") is not None else None,
                 "otherwise": opts["otherwise"].describe() if opts.get("otherwise") is not None else None}
                for key, opts in self._conditions
            ]
        return desc

    def __eq__(self, other):
        if not isinstance(other, Schema):
            return NotImplemented
        return type(self) is type(other) and self.describe() == other.describe()

    __hash__ = None

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.describe()!r}>"


class MixedSchema(Schema):
    pass


class StringSchema(Schema):
    type_name = "string"

    def _base_type(self):
        return str

    def min(self, limit: int, message: Optional[str] = None):
        return self._with_test("min", {"min": limit}, message, Field(min_length=limit))

    def max(self, limit: int, message: Optional[str] = None):
        return self._with_test("max", {"max": limit}, message, Field(max_length=limit))

    def length(self, size: int, message: Optional[str] = None):
        return self._with_test("length", {"length": size}, message, Field(min_length=size, max_length=size))

    def matches(self, pattern, message: Optional[str] = None):
        if isinstance(pattern, re.Pattern):
            pattern = pattern.pattern
        if not isinstance(pattern, str):
            raise TypeError("matches expects a regular expression")
        return self._with_test("matches", {"regex": pattern}, message, StringConstraints(pattern=pattern))

    def email(self, message: Optional[str] = None):
        return self._with_test("email", {}, message or "{path} must be a valid email",
                               AfterValidator(_email_validator))

    def trim(self):
        return self._with_test("trim", {}, None, StringConstraints(strip_whitespace=True))


class NumberSchema(Schema):
    type_name = "number"

    def _base_type(self):
        return int if any(t[0] == "integer" for t in self._tests) else float

    def min(self, limit, message: Optional[str] = None):
        return self._with_test("min", {"min": limit}, message, Field(ge=limit))

    def max(self, limit, message: Optional[str] = None):
        return self._with_test("max", {"max": limit}, message, Field(le=limit))

    def more_than(self, limit, message: Optional[str] = None):
        return self._with_test("more_than", {"more": limit}, message, Field(gt=limit))

    def less_than(self, limit, message: Optional[str] = None):
        return self._with_test("less_than", {"less": limit}, message, Field(lt=limit))

    def positive(self, message: Optional[str] = None):
        return self.more_than(0, message or "{path} must be a positive number")

    def negative(self, message: Optional[str] = None):
        return self.less_than(0, message or "{path} must be a negative number")

    def integer(self, message: Optional[str] = None):
        return self._with_test("integer", {}, message or "{path} must be an integer")


class BooleanSchema(Schema):
    type_name = "boolean"

    def _base_type(self):
        return bool


class ArraySchema(Schema):
    type_name = "array"

    def __init__(self, of: Optional[Schema] = None):
        super().__init__()
        self._inner = None
        if of is not None:
            self._inner = _require_schema(of, "array")

    def _base_type(self):
        return List[Any]

    def of(self, schema: Schema):
        clone = self._clone()
        clone._inner = _require_schema(schema, "of")
        return clone

    def min(self, limit: int, message: Optional[str] = None):
        return self._with_test("min", {"min": limit}, message, Field(min_length=limit))

    def max(self, limit: int, message: Optional[str] = None):
        return self._with_test("max", {"max": limit}, message, Field(max_length=limit))

    def length(self, size: int, message: Optional[str] = None):
        return self._with_test("length", {"length": size}, message, Field(min_length=size, max_length=size))

    def concat(self, other: Schema):
        clone = super().concat(other)
        if isinstance(other, ArraySchema) and other._inner is not None:
            clone._inner = other._inner
        return clone

    def _validate_inner(self, value, path, errors):
        if self._inner is None:
            return value
        items = []
        for i, item in enumerate(value):
            try:
                items.append(self._inner.validate(item, path=f"{path or ''}[{i}]"))
            except ValidationError as e:
                errors.extend(e.errors)
                items.append(item)
        return items

    def describe(self) -> Dict[str, Any]:
        desc = super().describe()
        desc["inner"] = self._inner.describe() if self._inner is not None else None
        return desc


class ObjectSchema(Schema):
    type_name = "object"

    def __init__(self, shape: Optional[Dict[str, Schema]] = None):
        super().__init__()
        self._fields: Dict[str, Schema] = {}
        if shape is not None:
            self._fields = _require_shape(shape)

    def _clone(self):
        clone = super()._clone()
        clone._fields = dict(self._fields)
        return clone

    def _base_type(self):
        return Dict[Any, Any]

    def shape(self, fields: Dict[str, Schema]):
        clone = self._clone()
        clone._fields.update(_require_shape(fields))
        return clone

    def concat(self, other: Schema):
        clone = super().concat(other)
        if isinstance(other, ObjectSchema):
            clone._fields.update(other._fields)
        return clone

    def _validate_inner(self, value, path, errors):
        result = dict(value)
        for key, field in self._fields.items():
            field_path = f"{path}.{key}" if path else key
            try:
                result[key] = field.validate(value.get(key), context=value, path=field_path)
            except ValidationError as e:
                errors.extend(e.errors)
        return result

    def describe(self) -> Dict[str, Any]:
        desc = super().describe()
        desc["fields"] = {key: field.describe() for key, field in self._fields.items()}
        return desc


def _require_schema(value, where):
    if not isinstance(value, Schema):
        raise TypeError(f"{where} expects a schema, got {type(value).__name__}")
    return value


def _require_shape(fields):
    if not isinstance(fields, dict):
        raise TypeError("shape expects a dict of field schemas")
    for key, field in fields.items():
        _require_schema(field, f"shape field '{key}'")
    return dict(fields)


class Yup:
    """Builder root: the entry points a definition's first call dispatches on."""

    def mixed(self):
        return MixedSchema()

    def string(self):
        return StringSchema()

    def number(self):
        return NumberSchema()

    def boolean(self):
        return BooleanSchema()

    def array(self, of: Optional[Schema] = None):
        return ArraySchema(of)

    def object(self, shape: Optional[Dict[str, Schema]] = None):
        return ObjectSchema(shape)


# Default builder root.
yup = Yup()
