"""Map raw import records onto typed servers-table rows."""

import logging
from typing import Any, Iterable, Optional

from registry_loader.models.raw import RawRecord
from registry_loader.models.row import MappedRow

from .categories import infer_hosting_type, infer_server_type, type_hints
from .columns import (
    BOOLEAN,
    COLUMNS,
    INTEGER,
    JSON,
    SCORING,
    SERVER_TYPE_HINTS,
    TEXT,
    TIMESTAMP,
    VARCHAR,
    ColumnSpec,
)
from .parsers import normalize_timestamp, parse_legacy_json, to_json_text, truncate_field

logger = logging.getLogger(__name__)

_TRUE_STRINGS = frozenset({"true", "t", "yes", "y", "1"})
_FALSE_STRINGS = frozenset({"false", "f", "no", "n", "0"})

# Range of a SQLite INTEGER
_INT_MIN = -(2**63)
_INT_MAX = 2**63 - 1


def _as_text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (dict, list)):
        return to_json_text(value)
    return str(value)


def _as_int(value: Any, spec: ColumnSpec, label: str) -> int:
    if value is None or value == "":
        return spec.default
    if isinstance(value, bool):
        return int(value)
    try:
        number = int(value)
    except (TypeError, ValueError):
        try:
            number = int(float(value))
        except (TypeError, ValueError, OverflowError):
            logger.warning("%s: non-numeric %s %r, using %s", label, spec.name, value, spec.default)
            return spec.default
    if not _INT_MIN <= number <= _INT_MAX:
        logger.warning("%s: %s %r out of range, using %s", label, spec.name, value, spec.default)
        return spec.default
    return number


def _as_bool(value: Any, spec: ColumnSpec, label: str) -> bool:
    if value is None:
        return spec.default
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    text = str(value).strip().lower()
    if text in _TRUE_STRINGS:
        return True
    if text in _FALSE_STRINGS:
        return False
    logger.warning("%s: unrecognized %s %r, using %s", label, spec.name, value, spec.default)
    return spec.default


class SchemaMapper:
    """
    Turns one RawRecord into one MappedRow.

    The shared scoring block is used for records that carry no scoring of
    their own. Mapping never raises: a column that cannot be derived becomes
    None (or its default) and the problem is logged with the record's name.
    """

    def __init__(self, scoring: Any = None):
        self.scoring = scoring

    def map(self, record: RawRecord) -> MappedRow:
        """Map a single record."""
        label = record.label
        values: dict[str, Any] = {}

        for spec in COLUMNS:
            present = spec.source_field in record.data
            # Text columns the source never set stay undefined
            if spec.kind in (TEXT, VARCHAR) and not present:
                continue
            try:
                values[spec.name] = self._convert(spec, record.data.get(spec.source_field), label)
            except Exception as e:
                logger.warning("%s: could not map %s (%s), storing null", label, spec.name, e)
                values[spec.name] = spec.default

        hints = type_hints(parse_legacy_json(record.data.get(SERVER_TYPE_HINTS), field=SERVER_TYPE_HINTS))
        values["server_type"] = infer_server_type(hints)
        values["hosting_type"] = infer_hosting_type(hints)
        values["mcp_server_type_json"] = to_json_text(hints)

        own_scoring = parse_legacy_json(record.data.get(SCORING), field=SCORING)
        if own_scoring is None:
            own_scoring = parse_legacy_json(self.scoring, field=SCORING)
        values["scoring"] = to_json_text(own_scoring)

        return MappedRow(**values)

    def map_many(self, records: Iterable[RawRecord]) -> list[MappedRow]:
        """Map records in input order."""
        return [self.map(r) for r in records]

    def _convert(self, spec: ColumnSpec, value: Any, label: str) -> Any:
        if spec.kind == VARCHAR:
            return truncate_field(_as_text(value), spec.max_length, spec.name)
        if spec.kind == TEXT:
            return _as_text(value)
        if spec.kind == JSON:
            return to_json_text(parse_legacy_json(value, field=f"{label}.{spec.name}"))
        if spec.kind == TIMESTAMP:
            return normalize_timestamp(value)
        if spec.kind == INTEGER:
            return _as_int(value, spec, label)
        if spec.kind == BOOLEAN:
            return _as_bool(value, spec, label)
        raise ValueError(f"Unknown column kind: {spec.kind}")
