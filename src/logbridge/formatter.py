"""
Turns an intercepted argument list into a single bounded message string.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Sequence

import orjson

from .serializer import MAX_SERIALIZE_DEPTH, SerializationContext, ValueInspector, format_stack, serialize

MAX_LOG_MESSAGE_LENGTH = 12000
TRUNCATION_MARKER = "… [truncated]"

DEVTOOL_FIELDS = ("message", "stack", "frame", "plugin", "id", "loc")


def coarse_str(value: Any) -> str:
    """Best-effort ``str`` that cannot raise."""
    try:
        return str(value)
    except Exception:
        return object.__repr__(value)


class MessageFormatter:
    """
    Stringifies arguments, appends dev-tool diagnostic detail and truncates.

    Args:
        max_length: Content length kept before the truncation marker
        max_depth: Serialization depth ceiling
        devtool_label: Prefix of every rendered dev-tool detail line
        inspector: Optional introspection override passed to the serializer
    """

    def __init__(
        self,
        *,
        max_length: int = MAX_LOG_MESSAGE_LENGTH,
        max_depth: int = MAX_SERIALIZE_DEPTH,
        devtool_label: str = "[vite:error]",
        inspector: ValueInspector | None = None,
    ):
        self.max_length = max_length
        self.max_depth = max_depth
        self.devtool_label = devtool_label
        self.inspector = inspector

    def format(self, args: Sequence[Any]) -> str:
        base_message = " ".join(self.stringify(arg) for arg in args)
        details = self.extract_devtool_details(args)
        message = f"{base_message}\n{details}" if details else base_message

        if len(message) <= self.max_length:
            return message
        return f"{message[: self.max_length]}{TRUNCATION_MARKER}"

    def stringify(self, value: Any) -> str:
        try:
            if isinstance(value, str):
                return value
            tree = serialize(value, SerializationContext(), inspector=self.inspector, max_depth=self.max_depth)
            return orjson.dumps(tree, default=coarse_str).decode()
        except Exception:
            return coarse_str(value)

    # =========================================================================
    # Dev-tool diagnostics
    # =========================================================================

    def extract_devtool_details(self, args: Sequence[Any]) -> str | None:
        # A marker string alone carries nothing to render; only structured
        # candidates produce detail lines.
        candidate = next((fields for fields in map(_devtool_fields, args) if fields), None)
        if candidate is None:
            return None
        try:
            return self._render_devtool_details(candidate) or None
        except Exception:
            return None

    def _render_devtool_details(self, fields: Mapping[str, Any]) -> str:
        label = self.devtool_label
        lines: list[str] = []

        message = fields.get("message")
        plugin = fields.get("plugin")
        file_id = fields.get("id")
        loc = fields.get("loc")
        frame = fields.get("frame")
        stack = fields.get("stack")

        if message:
            lines.append(f"{label} {coarse_str(message)}")
        if plugin:
            lines.append(f"{label} plugin: {coarse_str(plugin)}")
        if file_id:
            lines.append(f"{label} file: {coarse_str(file_id)}")

        loc_fields = _field_map(loc)
        if loc_fields is not None:
            parts = [coarse_str(loc_fields[key]) for key in ("file", "line", "column") if loc_fields.get(key) is not None]
            if parts:
                lines.append(f"{label} loc: {':'.join(parts)}")

        if isinstance(frame, str) and frame.strip():
            lines.append(f"{label} frame:\n{frame.strip()}")
        if isinstance(stack, str) and stack.strip():
            lines.append(f"{label} stack:\n{stack.strip()}")

        return "\n".join(lines)


def _field_map(value: Any) -> Mapping[str, Any] | None:
    if isinstance(value, Mapping):
        return value
    if value is not None and isinstance(getattr(value, "__dict__", None), Mapping):
        return vars(value)
    return None


def _devtool_fields(value: Any) -> dict[str, Any] | None:
    """The diagnostic fields ``value`` exposes, or None if it exposes none."""
    try:
        if value is None or isinstance(value, (str, bytes)):
            return None
        if isinstance(value, BaseException):
            fields = {key: getattr(value, key, None) for key in DEVTOOL_FIELDS}
            fields["message"] = fields["message"] or str(value)
            fields["stack"] = fields["stack"] or format_stack(value)
        else:
            source = _field_map(value)
            if source is None:
                return None
            fields = {key: source.get(key) for key in DEVTOOL_FIELDS}
        return fields if any(fields.values()) else None
    except Exception:
        return None
