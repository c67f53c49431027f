"""JSON codecs for the registry's irregular wire shapes.

The registry mixes two timestamp dialects, uses semantic versions as object
keys and flattens per-version timestamps into the same object as fixed
fields. Every decoder here works on already parsed JSON (``json.loads``
output) and raises ``DecodeError`` with a short description of what did not
match. Request bodies are never echoed back in error messages.
"""

import re
from datetime import datetime, timezone
from typing import Any

import httpx
from semantic_version import Version

from .errors import DecodeError

# RFC 3339 date-time, e.g. 2023-01-01T00:00:00Z or 2023-01-01t00:00:00.5+02:00
_RFC3339 = re.compile(
    r"^\d{4}-\d{2}-\d{2}[Tt ]\d{2}:\d{2}:\d{2}(\.\d+)?([Zz]|[+-]\d{2}:\d{2})$"
)

FIXED_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


def _kind(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def expect_object(value: Any, where: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise DecodeError(f"{where}: expected object, found {_kind(value)}")
    return value


def expect_array(value: Any, where: str) -> list[Any]:
    if not isinstance(value, list):
        raise DecodeError(f"{where}: expected array, found {_kind(value)}")
    return value


def expect_str(value: Any, where: str) -> str:
    if not isinstance(value, str):
        raise DecodeError(f"{where}: expected string, found {_kind(value)}")
    return value


def expect_bool(value: Any, where: str) -> bool:
    if not isinstance(value, bool):
        raise DecodeError(f"{where}: expected boolean, found {_kind(value)}")
    return value


def expect_uint(value: Any, where: str, bits: int = 64) -> int:
    """Accept a JSON integer in ``[0, 2**bits)``."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise DecodeError(f"{where}: expected unsigned integer, found {_kind(value)}")
    if value < 0 or value >= 2**bits:
        raise DecodeError(f"{where}: integer {value} out of range for u{bits}")
    return value


def require(obj: dict[str, Any], key: str, where: str) -> Any:
    """Return ``obj[key]``, failing when the field is absent."""
    if key not in obj:
        raise DecodeError(f"{where}: missing field '{key}'")
    return obj[key]


def decode_version(value: Any, where: str = "version") -> Version:
    text = expect_str(value, where)
    try:
        return Version(text)
    except ValueError:
        raise DecodeError(f"{where}: invalid semantic version {text!r}") from None


def encode_version(version: Version) -> str:
    return str(version)


def parse_rfc3339(text: str) -> datetime:
    """Parse a general RFC 3339 timestamp into an aware UTC datetime.

    Raises:
        ValueError: If ``text`` is not an RFC 3339 date-time
    """
    if not _RFC3339.match(text):
        raise ValueError(f"not an RFC 3339 timestamp: {text!r}")
    normalized = text[:10] + "T" + text[11:]
    if normalized[-1] in "Zz":
        normalized = normalized[:-1] + "+00:00"
    return datetime.fromisoformat(normalized).astimezone(timezone.utc)


def decode_rfc3339(value: Any, where: str = "timestamp") -> datetime:
    text = expect_str(value, where)
    try:
        return parse_rfc3339(text)
    except ValueError:
        raise DecodeError(f"{where}: invalid RFC 3339 timestamp") from None


def encode_rfc3339(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat()


def decode_fixed_timestamp(value: Any, where: str = "timestamp") -> datetime:
    """Decode the registry's fixed ``YYYY-MM-DDTHH:MM:SS.ffffffZ`` dialect.

    Unlike ``decode_rfc3339`` this rejects numeric offsets and timestamps
    without fractional seconds.
    """
    text = expect_str(value, where)
    try:
        parsed = datetime.strptime(text, FIXED_TIMESTAMP_FORMAT)
    except ValueError:
        raise DecodeError(f"{where}: expected timestamp like 2024-01-01T00:00:00.000000Z") from None
    return parsed.replace(tzinfo=timezone.utc)


def encode_fixed_timestamp(value: datetime) -> str:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime(FIXED_TIMESTAMP_FORMAT)


def decode_url(value: Any, where: str = "url") -> httpx.URL:
    text = expect_str(value, where)
    try:
        url = httpx.URL(text)
    except httpx.InvalidURL:
        raise DecodeError(f"{where}: malformed URL") from None
    if not url.is_absolute_url or not url.host:
        raise DecodeError(f"{where}: expected an absolute URL")
    return url


def encode_url(value: httpx.URL) -> str:
    return str(value)


def decode_version_time_map(value: Any, where: str = "versions") -> dict[Version, datetime]:
    """Decode a flat ``{version: rfc3339}`` object.

    Entries whose key is not a semantic version, or whose value is not an
    RFC 3339 string, are skipped.
    """
    obj = expect_object(value, where)
    versions: dict[Version, datetime] = {}
    for key, raw in obj.items():
        if not isinstance(raw, str):
            continue
        try:
            version = Version(key)
            stamp = parse_rfc3339(raw)
        except ValueError:
            continue
        versions[version] = stamp
    return versions


def encode_version_time_map(versions: dict[Version, datetime]) -> dict[str, str]:
    return {encode_version(version): encode_rfc3339(stamp) for version, stamp in versions.items()}
