"""Parameter validation driven by `FieldSpec` entries.

Validation is pure: it never touches the network. It walks the descriptor's
fields in declaration order and stops at the first problem, returning either
the coerced values or a `ValidationFailure` whose body is sent back as a 400.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Union

from .operations import FieldKind, FieldSpec, OperationDescriptor


@dataclass(frozen=True)
class ValidationFailure:
    field: str
    body: Dict[str, Any]


class _Invalid(Exception):
    """Raised internally by the coercers; never leaves this module."""


ValidationOutcome = Union[Dict[str, Any], ValidationFailure]


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_int(value: Any) -> int:
    if isinstance(value, bool):
        raise _Invalid()
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise _Invalid()
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            raise _Invalid() from None
    raise _Invalid()


def parse_float(value: Any) -> float:
    if isinstance(value, bool):
        raise _Invalid()
    if isinstance(value, (int, float)):
        parsed = float(value)
    elif isinstance(value, str):
        try:
            parsed = float(value.strip())
        except ValueError:
            raise _Invalid() from None
    else:
        raise _Invalid()
    if math.isnan(parsed):
        raise _Invalid()
    return parsed


def _in_range(spec: FieldSpec, value: float) -> bool:
    if spec.minimum is not None and value < spec.minimum:
        return False
    if spec.maximum is not None and value > spec.maximum:
        return False
    return True


def _range_text(spec: FieldSpec) -> str:
    if spec.minimum is not None and spec.maximum is not None:
        return f"between {spec.minimum:g} and {spec.maximum:g}"
    if spec.minimum is not None:
        return f"greater than or equal to {spec.minimum:g}"
    if spec.maximum is not None:
        return f"less than or equal to {spec.maximum:g}"
    return ""


def _missing(op: OperationDescriptor, spec: FieldSpec) -> ValidationFailure:
    suffix = " or it is empty" if spec.kind is FieldKind.STRING else ""
    body: Dict[str, Any] = {
        "error": f'Missing parameter "{spec.name}"{suffix}',
        "field": spec.name,
        "required": op.required,
    }
    if op.optional:
        body["optional"] = op.optional
    if spec.hint:
        body["hint"] = spec.hint
    return ValidationFailure(spec.name, body)


def _invalid(spec: FieldSpec, received: Any, message: str, **extra: Any) -> ValidationFailure:
    body: Dict[str, Any] = {"error": message, "field": spec.name, "received": received, **extra}
    if spec.invalid_hint:
        body["hint"] = spec.invalid_hint
    return ValidationFailure(spec.name, body)


def _number_message(spec: FieldSpec) -> str:
    kind_text = "an integer" if spec.kind is FieldKind.INTEGER else "a number"
    return f'Parameter "{spec.name}" must be {kind_text} {_range_text(spec)}'.rstrip()


def _check(op: OperationDescriptor, spec: FieldSpec, raw: Any) -> tuple[Optional[Any], Optional[ValidationFailure]]:
    if spec.kind is FieldKind.STRING:
        if _is_blank(raw):
            return None, (_missing(op, spec) if spec.required else None)
        if isinstance(raw, (dict, list)):
            return None, _invalid(spec, raw, f'Parameter "{spec.name}" must be a string')
        return raw if isinstance(raw, str) else str(raw), None

    if spec.kind is FieldKind.ENUM:
        if _is_blank(raw):
            return None, (_missing(op, spec) if spec.required else None)
        normalized = str(raw).strip().lower()
        if normalized not in spec.choices:
            return None, _invalid(
                spec, raw, f'Invalid value for parameter "{spec.name}"', allowed=list(spec.choices)
            )
        return normalized, None

    if spec.kind in (FieldKind.INTEGER, FieldKind.NUMBER):
        message = _number_message(spec)
        if raw is None:
            if spec.required:
                return None, _missing(op, spec)
            return spec.default, None
        try:
            parsed = parse_int(raw) if spec.kind is FieldKind.INTEGER else parse_float(raw)
        except _Invalid:
            return None, _invalid(spec, raw, message)
        if not _in_range(spec, parsed):
            return None, _invalid(spec, raw, message)
        return parsed, None

    if spec.kind is FieldKind.LIST:
        if raw is None and spec.required:
            return None, _missing(op, spec)
        return (raw if isinstance(raw, list) else None), None

    if raw is None and spec.required:
        return None, _missing(op, spec)
    return raw, None


def validate_params(op: OperationDescriptor, params: Mapping[str, Any]) -> ValidationOutcome:
    """Validate and coerce a Parameter Bag for one operation.

    Args:
        op: The operation descriptor.
        params: Merged query/body parameters.

    Returns:
        A dict with one entry per declared field (``None`` when absent and
        without default), or the first `ValidationFailure` encountered.

    Examples:
        >>> from estudia_bridge.bridge.operations import get_operation
        >>> validate_params(get_operation("search-chunks"), {"query_text": "q", "classroom_id": "c"})["limit"]
        5
    """
    values: Dict[str, Any] = {}
    for spec in op.fields:
        if spec.reject_null and spec.name in params and params[spec.name] is None:
            return _invalid(spec, None, _number_message(spec))
        value, failure = _check(op, spec, params.get(spec.name))
        if failure is not None:
            return failure
        values[spec.name] = value
    return values
