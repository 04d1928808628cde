"""
Transforms schema definitions (plain lists and dicts) into live schema objects.

A definition is a list of tagged calls folded left to right onto a builder
root: ``[["yup.string"], ["yup.required"]]`` evaluates to
``root.string().required()``. Arguments may themselves be definitions, lists
or dicts of definitions; everything else is passed through untouched.
"""

import logging

from jsonyup.jsonyup_builder import yup
from jsonyup.jsonyup_datatypes import (
    DEFINITION_PREFIX, SEQUENCE_TYPES, MethodNotFound, DefinitionError
)
from jsonyup.jsonyup_printer import Printer

logger = logging.getLogger(__name__)


class SchemaTransformer:
    """Replays definitions against one builder root.

    The root is borrowed for each pass and only ever has its methods called;
    the transformer itself keeps no state between calls.
    """

    def __init__(self, root=None, prefix: str = DEFINITION_PREFIX, strict: bool = False):
        self.root = yup if root is None else root
        self.prefix = prefix
        self.strict = strict
        self._printer = Printer(prefix)

    # --- Shape recognition ---

    def is_call(self, value: object) -> bool:
        """True when `value` is a list whose first item is a prefixed tag."""
        return (
            isinstance(value, SEQUENCE_TYPES)
            and len(value) > 0
            and isinstance(value[0], str)
            and value[0].startswith(self.prefix)
        )

    def is_definition(self, value: object) -> bool:
        """True when `value` is a list of calls.

        Only the first item is checked; the rest are assumed to be calls too.
        """
        return isinstance(value, SEQUENCE_TYPES) and len(value) > 0 and self.is_call(value[0])

    # --- Recursive descent ---

    def transform_argument(self, argument: object) -> object:
        if self.is_definition(argument):
            return self.transform_schema(argument)

        # Nested structures, e.g. a list of schemas: [[[...]], [[...]]]
        if isinstance(argument, SEQUENCE_TYPES):
            items = [self.transform_argument(a) for a in argument]
            return tuple(items) if isinstance(argument, tuple) else items

        # Plain records only; compiled patterns and other objects fall through
        if isinstance(argument, dict):
            return self.transform_object(argument)

        return argument

    def transform_schema(self, definition) -> object:
        """Fold the calls of `definition` onto the root and return the result."""
        if self.strict:
            self._check_calls(definition)

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Building %s", self._printer.pformat(definition))
        schema = self.root
        for call in definition:
            tag, *args = call
            name = tag[len(self.prefix):]
            method = self._lookup(schema, name, definition)
            schema = method(*[self.transform_argument(a) for a in args])
        return schema

    def transform_object(self, json) -> object:
        """Return a copy of `json` with its definition values built.

        A value holding a single unwrapped call (``["yup.string"]``) is built
        as a one-call definition. Values that are not definitions (e.g. the
        ``is`` option of ``when()``) are left as they are. Non-dict input is
        returned unchanged.
        """
        if not isinstance(json, dict):
            return json
        result = {}
        for key, value in json.items():
            if self.is_definition(value):
                value = self.transform_schema(value)
            elif self.is_call(value):
                value = self.transform_schema([value])
            result[key] = value
        return result

    def transform_all(self, json) -> object:
        """Build a single schema from a definition or a single unwrapped call.

        Input that is not a definition yields the root's neutral ``mixed()``
        schema.
        """
        if isinstance(json, SEQUENCE_TYPES) and len(json) > 0 and isinstance(json[0], SEQUENCE_TYPES):
            wrapped = json
        else:
            wrapped = [json]

        if not self.is_definition(wrapped):
            logger.debug("Not a schema definition, using mixed(): %r", json)
            return self.root.mixed()

        return self.transform_schema(wrapped)

    # --- Helpers ---

    def _lookup(self, schema, name, definition):
        # Private and dunder attributes are never reachable from data.
        method = getattr(schema, name, None) if name and not name.startswith("_") else None
        if not callable(method):
            raise MethodNotFound(name, schema, self._printer.pformat(definition))
        logger.debug("Calling %s.%s", type(schema).__name__, name)
        return method

    def _check_calls(self, definition):
        for i, call in enumerate(definition):
            if not self.is_call(call):
                raise DefinitionError(
                    f"Item {i} of definition is not a '{self.prefix}' call: {call!r}",
                    index=i, value=call,
                )


def transform_object(json, instance=None, prefix: str = DEFINITION_PREFIX, strict: bool = False):
    """Transform a dict into a dict whose definition values are built schemas."""
    return SchemaTransformer(instance, prefix, strict).transform_object(json)


def transform_all(json, instance=None, prefix: str = DEFINITION_PREFIX, strict: bool = False):
    """Transform a definition (or a single call) into a schema."""
    return SchemaTransformer(instance, prefix, strict).transform_all(json)


__all__ = [
    "SchemaTransformer",
    "transform_object",
    "transform_all",
]
