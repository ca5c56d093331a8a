"""
Bounded, cycle-safe conversion of arbitrary runtime values into JSON-safe trees.

The traversal never raises. Values it cannot or should not represent fully are
replaced by sentinel strings:

- ``[MaxDepth]``: the depth ceiling was reached
- ``[Circular]``: a keyed record was already visited in this call
- ``[Unreadable: <Error>]``: reading a single field raised
- ``[Unserializable]``: anything else went wrong

Introspection is isolated behind :class:`ValueInspector` so the traversal in
:func:`serialize` stays independent of how values are classified and walked.
"""

from __future__ import annotations

import datetime
import inspect
import traceback
from collections import deque
from collections.abc import Mapping, Set
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from pathlib import PurePath
from typing import Any, Iterable, Iterator, Protocol
from uuid import UUID

MAX_SERIALIZE_DEPTH = 5
MAX_SAFE_INTEGER = 2**53 - 1

MAX_DEPTH_SENTINEL = "[MaxDepth]"
CIRCULAR_SENTINEL = "[Circular]"
UNSERIALIZABLE_SENTINEL = "[Unserializable]"


class ValueKind(str, Enum):
    NULL = "null"
    ERROR = "error"
    SEQUENCE = "sequence"
    EVENT = "event"
    RECORD = "record"
    CALLABLE = "callable"
    BIG_INTEGER = "big_integer"
    PRIMITIVE = "primitive"


@dataclass
class SerializationContext:
    """Per-call traversal state. ``visited`` is shared by every branch."""

    depth: int = 0
    visited: set[int] = field(default_factory=set)

    def descend(self) -> "SerializationContext":
        return SerializationContext(depth=self.depth + 1, visited=self.visited)


# =============================================================================
# Inspector Capability
# =============================================================================


class ValueInspector(Protocol):
    def classify(self, value: Any) -> ValueKind: ...

    def fields(self, value: Any) -> Iterable[tuple[str, Any]]: ...

    def identity(self, value: Any) -> int: ...


class _Unreadable:
    __slots__ = ("error",)

    def __init__(self, error: BaseException):
        self.error = error

    def __str__(self) -> str:
        return f"[Unreadable: {type(self.error).__name__}]"


_SEQUENCE_TYPES = (list, tuple, deque, Set)
# Leaves rendered by the JSON encoder (natively or via str), never walked.
_OPAQUE_TYPES = (
    float,
    str,
    bytes,
    bytearray,
    memoryview,
    Enum,
    UUID,
    Decimal,
    PurePath,
    datetime.date,
    datetime.time,
    datetime.timedelta,
)


class ReflectiveInspector:
    """Classifies and walks values with Python's own introspection."""

    def classify(self, value: Any) -> ValueKind:
        if value is None:
            return ValueKind.NULL
        if isinstance(value, BaseException):
            return ValueKind.ERROR
        if isinstance(value, bool):
            return ValueKind.PRIMITIVE
        if isinstance(value, int):
            return ValueKind.BIG_INTEGER if abs(value) > MAX_SAFE_INTEGER else ValueKind.PRIMITIVE
        if isinstance(value, _OPAQUE_TYPES):
            return ValueKind.PRIMITIVE
        if isinstance(value, _SEQUENCE_TYPES):
            return ValueKind.SEQUENCE
        if inspect.isroutine(value) or inspect.isclass(value) or inspect.ismodule(value):
            return ValueKind.CALLABLE
        if isinstance(value, Mapping):
            return ValueKind.RECORD
        if self._has_own_fields(value):
            return ValueKind.EVENT if isinstance(self._own_attr(value, "type"), str) else ValueKind.RECORD
        return ValueKind.PRIMITIVE

    def fields(self, value: Any) -> Iterator[tuple[str, Any]]:
        if isinstance(value, Mapping):
            for key in list(value.keys()):
                yield self._key(key), self._read(lambda: value[key])
            return

        seen: set[str] = set()
        instance_dict = getattr(value, "__dict__", None)
        if isinstance(instance_dict, Mapping):
            for key in list(instance_dict.keys()):
                seen.add(key)
                yield key, instance_dict[key]

        for name in self._slot_names(type(value)):
            if name in seen or name.startswith("__"):
                continue
            seen.add(name)
            try:
                slot_value = getattr(value, name)
            except AttributeError:
                continue  # unset slot
            except Exception as exc:
                slot_value = _Unreadable(exc)
            yield name, slot_value

    def identity(self, value: Any) -> int:
        return id(value)

    @staticmethod
    def _key(key: Any) -> str:
        # orjson only accepts exact str keys, not subclasses such as StrEnum
        return key if type(key) is str else str(key)

    @staticmethod
    def _read(getter: Any) -> Any:
        try:
            return getter()
        except Exception as exc:
            return _Unreadable(exc)

    @staticmethod
    def _slot_names(cls: type) -> list[str]:
        names: list[str] = []
        for klass in cls.__mro__:
            slots = klass.__dict__.get("__slots__", ())
            if isinstance(slots, str):
                slots = (slots,)
            names.extend(slots)
        return names

    def _has_own_fields(self, value: Any) -> bool:
        if isinstance(getattr(value, "__dict__", None), Mapping):
            return True
        return bool(self._slot_names(type(value)))

    def _own_attr(self, value: Any, name: str) -> Any:
        instance_dict = getattr(value, "__dict__", None)
        if isinstance(instance_dict, Mapping) and name in instance_dict:
            return instance_dict[name]
        if name in self._slot_names(type(value)):
            return getattr(value, name, None)
        return None


DEFAULT_INSPECTOR = ReflectiveInspector()


# =============================================================================
# Traversal
# =============================================================================


def serialize(
    value: Any,
    context: SerializationContext | None = None,
    *,
    inspector: ValueInspector | None = None,
    max_depth: int = MAX_SERIALIZE_DEPTH,
) -> Any:
    """Convert ``value`` into a JSON-safe tree. Never raises."""
    context = context or SerializationContext()
    inspector = inspector or DEFAULT_INSPECTOR
    return _serialize(value, context, inspector, max_depth)


def _serialize(value: Any, ctx: SerializationContext, inspector: ValueInspector, max_depth: int) -> Any:
    try:
        return _visit(value, ctx, inspector, max_depth)
    except Exception:
        return UNSERIALIZABLE_SENTINEL


def _visit(value: Any, ctx: SerializationContext, inspector: ValueInspector, max_depth: int) -> Any:
    if isinstance(value, _Unreadable):
        return str(value)

    kind = inspector.classify(value)
    if kind is ValueKind.NULL:
        return None

    if ctx.depth >= max_depth:
        return MAX_DEPTH_SENTINEL

    if kind is ValueKind.ERROR:
        return _serialize_error(value, ctx, inspector, max_depth)

    if kind is ValueKind.SEQUENCE:
        child = ctx.descend()
        return [_serialize(item, child, inspector, max_depth) for item in list(value)]

    if kind is ValueKind.EVENT:
        child = ctx.descend()
        output: dict[str, Any] = {"type": getattr(value, "type", None)}
        for key, item in inspector.fields(value):
            output[key] = _serialize(item, child, inspector, max_depth)
        return output

    if kind is ValueKind.RECORD:
        identity = inspector.identity(value)
        if identity in ctx.visited:
            return CIRCULAR_SENTINEL
        ctx.visited.add(identity)

        child = ctx.descend()
        return {key: _serialize(item, child, inspector, max_depth) for key, item in inspector.fields(value)}

    if kind is ValueKind.CALLABLE:
        return _describe_callable(value)

    if kind is ValueKind.BIG_INTEGER:
        return f"{value}n"

    return value


def _serialize_error(
    error: BaseException, ctx: SerializationContext, inspector: ValueInspector, max_depth: int
) -> dict[str, Any]:
    child = ctx.descend()
    output: dict[str, Any] = {
        "name": type(error).__name__,
        "message": error_message(error),
        "stack": format_stack(error),
    }

    cause = error_cause(error)
    if cause is not None:
        output["cause"] = _serialize(cause, child, inspector, max_depth)

    for key, item in inspector.fields(error):
        output[key] = _serialize(item, child, inspector, max_depth)
    return output


def error_message(error: BaseException) -> str:
    try:
        return str(error)
    except Exception:
        return type(error).__name__


def error_cause(error: BaseException) -> BaseException | None:
    if error.__cause__ is not None:
        return error.__cause__
    if error.__context__ is not None and not error.__suppress_context__:
        return error.__context__
    return None


def format_stack(error: BaseException) -> str:
    """The formatted traceback, or ``Name: message`` when none is attached."""
    if error.__traceback__ is None:
        message = error_message(error)
        return f"{type(error).__name__}: {message}" if message else type(error).__name__
    try:
        lines = traceback.format_exception(type(error), error, error.__traceback__, chain=False)
    except Exception:
        return type(error).__name__
    return "".join(lines).rstrip("\n")


def _describe_callable(value: Any) -> str:
    name = getattr(value, "__qualname__", None) or getattr(value, "__name__", None) or ""
    if not isinstance(name, str) or not name or name.endswith("<lambda>"):
        name = "anonymous"
    if inspect.ismodule(value):
        label = "Module"
    elif inspect.isclass(value):
        label = "Class"
    else:
        label = "Function"
    return f"[{label} {name}]"
