"""
Date transform — turn ISO-8601 timestamp strings in API payloads into datetimes.

Applied to every record as soon as it is received so no other code
re-parses timestamps.
Version: 1.0.0
"""
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Sequence


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO-8601 string, accepting a trailing 'Z' for UTC."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def coerce_timestamp(value: Any) -> Any:
    """Datetime for a parseable non-empty string, the value unchanged otherwise."""
    if isinstance(value, str) and value:
        try:
            return parse_iso_datetime(value)
        except ValueError:
            return value
    return value


def transform_dates(record: Dict[str, Any], date_fields: Iterable[str]) -> Dict[str, Any]:
    """
    Return a shallow copy of record with the named fields parsed to datetime.

    - Non-empty strings become datetime objects.
    - None / missing fields are left as they are (nothing is added).
    - Fields not listed are untouched.
    - Malformed strings are kept unchanged instead of raising, so callers
      must check isinstance(value, datetime) before relying on it.

    Args:
        record: Raw payload dict (not modified)
        date_fields: Names of the fields holding timestamps

    Returns:
        dict: New record with transformed date fields
    """
    result = dict(record)
    for field in date_fields:
        if field in result:
            result[field] = coerce_timestamp(result[field])
    return result


def transform_dates_list(
    records: Sequence[Dict[str, Any]], date_fields: Iterable[str]
) -> List[Dict[str, Any]]:
    """Apply transform_dates to each record independently."""
    fields = list(date_fields)
    return [transform_dates(record, fields) for record in records]


def create_date_transformer(
    date_fields: Iterable[str],
) -> Callable[[Dict[str, Any]], Dict[str, Any]]:
    """Build a single-argument transformer for a fixed set of date fields."""
    fields = list(date_fields)

    def _transform(record: Dict[str, Any]) -> Dict[str, Any]:
        return transform_dates(record, fields)

    return _transform


TIMESTAMP_FIELDS = ("updatedAt", "createdAt")

publication_transformer = create_date_transformer(TIMESTAMP_FIELDS)
build_transformer = create_date_transformer(TIMESTAMP_FIELDS)
