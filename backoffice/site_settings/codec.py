"""Value codec for typed settings.

Settings are persisted as raw strings next to a ``data_type`` tag. The codec
turns the pair into a tagged ``SettingValue`` and back. Decoding never
raises: malformed JSON degrades to the raw string and unparseable numbers
decode to ``None``.
"""

import json
import math
import re
from dataclasses import dataclass
from typing import Any, ClassVar, Union

from backoffice.site_settings.models import DataType

# Leading numeric prefix, the same part of a string a browser's parseFloat reads
_FLOAT_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_INFINITY = re.compile(r"^\s*([+-]?)Infinity")

Number = int | float


@dataclass(frozen=True)
class StringValue:
    value: str
    data_type: ClassVar[DataType] = DataType.STRING


@dataclass(frozen=True)
class BoolValue:
    value: bool
    data_type: ClassVar[DataType] = DataType.BOOLEAN


@dataclass(frozen=True)
class NumberValue:
    """Numeric setting; ``None`` stands for a stored value that is not a number."""

    value: Number | None
    data_type: ClassVar[DataType] = DataType.NUMBER


@dataclass(frozen=True)
class JsonValue:
    """Arbitrary JSON setting, or the raw string when it failed to parse."""

    value: Any
    data_type: ClassVar[DataType] = DataType.JSON


@dataclass(frozen=True)
class ArrayValue:
    """JSON array setting, or the raw string when it failed to parse."""

    value: Any
    data_type: ClassVar[DataType] = DataType.ARRAY


SettingValue = Union[StringValue, BoolValue, NumberValue, JsonValue, ArrayValue]

_VARIANTS: dict[DataType, type] = {
    DataType.STRING: StringValue,
    DataType.BOOLEAN: BoolValue,
    DataType.NUMBER: NumberValue,
    DataType.JSON: JsonValue,
    DataType.ARRAY: ArrayValue,
}


def parse_number(raw: str) -> Number | None:
    """Parse the leading number of ``raw``.

    Integral results come back as ``int`` so "60" round-trips as 60, not 60.0.
    Returns None when no number can be read.
    """
    match = _FLOAT_PREFIX.match(raw)
    if match is None:
        inf = _INFINITY.match(raw)
        if inf is None:
            return None
        return -math.inf if inf.group(1) == "-" else math.inf

    number = float(match.group(1))
    if math.isfinite(number) and number.is_integer() and abs(number) < 2**53:
        return int(number)
    return number


def _parse_json(raw: str) -> Any:
    try:
        return json.loads(raw)
    except (ValueError, TypeError):
        return raw


def decode(raw: str | None, data_type: DataType | str) -> SettingValue:
    """Decode a stored raw value into its typed form.

    Unknown data types are treated as strings.
    """
    try:
        data_type = DataType(data_type)
    except ValueError:
        data_type = DataType.STRING

    if raw is None:
        raw = ""

    if data_type is DataType.BOOLEAN:
        return BoolValue(raw in ("true", "1"))
    if data_type is DataType.NUMBER:
        return NumberValue(parse_number(raw))
    if data_type is DataType.JSON:
        return JsonValue(_parse_json(raw))
    if data_type is DataType.ARRAY:
        return ArrayValue(_parse_json(raw))
    return StringValue(raw)


def _format_number(number: Number | None) -> str:
    if number is None or (isinstance(number, float) and math.isnan(number)):
        return "NaN"
    if isinstance(number, float):
        if math.isinf(number):
            return "-Infinity" if number < 0 else "Infinity"
        if number.is_integer() and abs(number) < 2**53:
            return str(int(number))
        return repr(number)
    return str(number)


def to_text(value: Any) -> str:
    """String conversion for untyped values, rendering JSON scalars as JSON does."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, int | float):
        return _format_number(value)
    return json.dumps(value, separators=(",", ":"))


def is_truthy(value: Any) -> bool:
    """Truthiness of a JSON-decoded request value.

    Empty objects and arrays count as true, as they do in the browser that
    submits them.
    """
    if value is None or value is False:
        return False
    if isinstance(value, int | float) and not isinstance(value, bool):
        return value != 0 and not math.isnan(value)
    if isinstance(value, str):
        return value != ""
    return True


def encode(value: SettingValue) -> str:
    """Encode a typed value into its raw stored form."""
    if isinstance(value, BoolValue):
        return "true" if value.value else "false"
    if isinstance(value, NumberValue):
        return _format_number(value.value)
    if isinstance(value, JsonValue | ArrayValue):
        if isinstance(value.value, str):
            return value.value
        return json.dumps(value.value, separators=(",", ":"))
    return to_text(value.value)


def coerce(value: Any, data_type: DataType | str) -> SettingValue:
    """Wrap an untyped request value in the variant for ``data_type``."""
    data_type = DataType(data_type)
    if data_type is DataType.BOOLEAN:
        return BoolValue(is_truthy(value))
    if data_type is DataType.NUMBER:
        if isinstance(value, int | float) and not isinstance(value, bool):
            return NumberValue(value)
        return NumberValue(parse_number(to_text(value)))
    if data_type in (DataType.JSON, DataType.ARRAY):
        return _VARIANTS[data_type](value)
    return StringValue(to_text(value))


def encode_python(value: Any, data_type: DataType | str) -> str:
    """Encode an untyped request value according to the stored data type."""
    data_type = DataType(data_type)
    if data_type is DataType.NUMBER and (
        isinstance(value, bool) or not isinstance(value, int | float)
    ):
        # Keep the caller's text verbatim; only real numbers get normalised
        return to_text(value)
    return encode(coerce(value, data_type))


def plain(value: SettingValue) -> Any:
    """Return the JSON-compatible python value carried by ``value``.

    Non-finite numbers become None, which is how JSON represents them.
    """
    inner = value.value
    if isinstance(value, NumberValue) and isinstance(inner, float) and not math.isfinite(inner):
        return None
    return inner
