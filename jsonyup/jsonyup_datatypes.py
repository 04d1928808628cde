"""
Core constants and error types shared by the jsonyup transformer and printer.

A schema definition is plain data: a list of tagged calls such as
``[["yup.string"], ["yup.min", 3], ["yup.required"]]``. The tag's namespace
prefix marks a string as a dispatchable method reference.
"""

from typing import Any, Optional

# Tags must start with this prefix to be recognized as calls.
DEFINITION_PREFIX = "yup."

# Ordered sequences accepted wherever a list is expected (JSON and YAML
# loaders produce lists; tuples are accepted for definitions written in Python).
SEQUENCE_TYPES = (list, tuple)


class MethodNotFound(AttributeError):
    """A tagged call named a method the current receiver does not expose."""
    def __init__(self, name: str, receiver: Any, definition: Optional[str] = None):
        message = f"'{type(receiver).__name__}' object has no method '{name}'"
        if definition:
            message += f" (in {definition})"
        super().__init__(message)
        self.name = name
        self.receiver = receiver
        self.definition = definition


class DefinitionError(ValueError):
    """A call sequence is malformed (strict mode only)."""
    def __init__(self, message: str, index: Optional[int] = None, value: Any = None):
        super().__init__(message)
        self.index = index
        self.value = value
