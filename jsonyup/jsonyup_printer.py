"""
A pretty-printer for schema definitions.

Renders a call sequence as the chained expression it stands for, e.g.
``[["yup.string"], ["yup.min", 3]]`` becomes ``yup.string().min(3)``.
"""
import collections.abc
import re

from jsonyup.jsonyup_datatypes import DEFINITION_PREFIX, SEQUENCE_TYPES


class Printer:
    """Formats definitions and their arguments into readable call chains."""

    def __init__(self, prefix=DEFINITION_PREFIX):
        self.prefix = prefix
        self._handlers = self._create_handlers()

    def pformat(self, obj):
        """Public entry point to format a definition (or any value)."""
        if self._is_definition(obj):
            return self._pformat_chain(obj)
        return repr(obj)

    def _is_call(self, obj):
        return (
            isinstance(obj, SEQUENCE_TYPES)
            and len(obj) > 0
            and isinstance(obj[0], str)
            and obj[0].startswith(self.prefix)
        )

    def _is_definition(self, obj):
        return isinstance(obj, SEQUENCE_TYPES) and len(obj) > 0 and self._is_call(obj[0])

    def _get_handler(self, obj):
        """Dispatcher to find the correct formatting method for an argument."""
        if self._is_definition(obj):
            return self._pformat_chain
        obj_type = type(obj)
        if obj_type in self._handlers:
            return self._handlers[obj_type]
        if isinstance(obj, collections.abc.Mapping): return self._pformat_dict
        if isinstance(obj, SEQUENCE_TYPES): return self._pformat_list
        # Default to Python's repr for unknown types
        return repr

    def _create_handlers(self):
        return {
            list: self._pformat_list,
            tuple: self._pformat_list,
            dict: self._pformat_dict,
            re.Pattern: self._pformat_pattern,
        }

    def _pformat_arg(self, obj):
        return self._get_handler(obj)(obj)

    def _pformat_chain(self, obj):
        parts = []
        for i, call in enumerate(obj):
            if not self._is_call(call):
                # Heterogeneous tail; show it verbatim rather than guess.
                parts.append(f".<{call!r}>")
                continue
            tag, *args = call
            name = tag if i == 0 else "." + tag[len(self.prefix):]
            parts.append(f"{name}({', '.join(self._pformat_arg(a) for a in args)})")
        return "".join(parts)

    def _pformat_list(self, obj):
        return "[" + ", ".join(self._pformat_arg(x) for x in obj) + "]"

    def _pformat_dict(self, obj):
        items = (f"{k!r}: {self._pformat_arg(v)}" for k, v in obj.items())
        return "{" + ", ".join(items) + "}"

    def _pformat_pattern(self, obj):
        return f"re.compile({obj.pattern!r})"
