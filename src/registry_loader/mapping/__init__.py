"""Record-to-row mapping: tolerant parsers, column table, categorical inference."""

from registry_loader.mapping.categories import infer_hosting_type, infer_server_type, type_hints
from registry_loader.mapping.mapper import SchemaMapper
from registry_loader.mapping.parsers import (
    normalize_timestamp,
    parse_legacy_json,
    to_json_text,
    truncate_field,
)

__all__ = [
    "SchemaMapper",
    "infer_hosting_type",
    "infer_server_type",
    "normalize_timestamp",
    "parse_legacy_json",
    "to_json_text",
    "truncate_field",
    "type_hints",
]
