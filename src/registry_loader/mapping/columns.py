"""Declarative column table for the servers destination table."""

from dataclasses import dataclass
from typing import Any, Optional

# Column kinds
TEXT = "text"  # unbounded text, no length limit
VARCHAR = "varchar"  # fixed-width text, truncated to max_length
JSON = "json"  # legacy/JSON collection, stored as canonical JSON text
TIMESTAMP = "timestamp"
INTEGER = "integer"  # counter, defaults to 0 when absent
BOOLEAN = "boolean"  # flag, defaults per column when absent


@dataclass(frozen=True)
class ColumnSpec:
    """How one destination column is derived from a raw record."""

    name: str
    kind: str
    max_length: Optional[int] = None
    default: Any = None
    source: Optional[str] = None

    @property
    def source_field(self) -> str:
        return self.source or self.name


COLUMNS: tuple[ColumnSpec, ...] = (
    ColumnSpec("metadata_record_created_at", TIMESTAMP),
    ColumnSpec("metadata_record_updated_at", TIMESTAMP),
    ColumnSpec("metadata_is_active", BOOLEAN, default=True),
    ColumnSpec("mcp_name", VARCHAR, 255),
    ColumnSpec("mcp_description", TEXT),
    ColumnSpec("mcp_purpose", TEXT),
    ColumnSpec("mcp_server_primary_category", VARCHAR, 100),
    ColumnSpec("mcp_server_secondary_categories_json", JSON),
    ColumnSpec("mcp_server_maturity_indicator", VARCHAR, 50),
    ColumnSpec("mcp_integration_complexity_indicator", VARCHAR, 50),
    ColumnSpec("app_domain", VARCHAR, 255),
    ColumnSpec("app_slug", VARCHAR, 100),
    ColumnSpec("app_description", TEXT),
    ColumnSpec("provider_name", VARCHAR, 255),
    ColumnSpec("provider_is_official", BOOLEAN, default=False),
    ColumnSpec("meta_source_data_last_updated", TIMESTAMP),
    ColumnSpec("meta_declared_license", VARCHAR, 100),
    ColumnSpec("meta_information_sources", TEXT),
    ColumnSpec("mcp_features_json", JSON),
    ColumnSpec("mcp_requirements_json", JSON),
    ColumnSpec("tools_overview_description", TEXT),
    ColumnSpec("tools_count", INTEGER, default=0),
    ColumnSpec("tools_distinct_categories_count", INTEGER, default=0),
    ColumnSpec("tools_definitions_json", JSON),
    ColumnSpec("repo_platform", VARCHAR, 50),
    ColumnSpec("repo_owner_login", VARCHAR, 255),
    ColumnSpec("repo_owner_avatar_url", VARCHAR, 500),
    ColumnSpec("repo_full_name", VARCHAR, 255),
    ColumnSpec("repo_stargazers_count", INTEGER, default=0),
    ColumnSpec("repo_watchers_count", INTEGER, default=0),
    ColumnSpec("repo_forks_count", INTEGER, default=0),
    ColumnSpec("repo_primary_language", VARCHAR, 50),
    ColumnSpec("repo_description", TEXT),
    ColumnSpec("repo_html_url", VARCHAR, 500),
    ColumnSpec("repo_license_name", VARCHAR, 100),
    ColumnSpec("repo_license_spdx_id", VARCHAR, 20),
    ColumnSpec("repo_topics_json", JSON),
    ColumnSpec("repo_created_at", TIMESTAMP),
    ColumnSpec("repo_updated_at", TIMESTAMP),
    ColumnSpec("repo_last_push_at", TIMESTAMP),
    ColumnSpec("repo_open_issues_count", INTEGER, default=0),
    ColumnSpec("repo_has_issues_enabled", BOOLEAN, default=False),
    ColumnSpec("repo_has_projects_enabled", BOOLEAN, default=False),
    ColumnSpec("repo_has_wiki_enabled", BOOLEAN, default=False),
    ColumnSpec("repo_has_discussions_enabled", BOOLEAN, default=False),
    ColumnSpec("repo_is_archived", BOOLEAN, default=False),
    ColumnSpec("repo_is_disabled", BOOLEAN, default=False),
    ColumnSpec("repo_file_tree_text", TEXT),
    ColumnSpec("mcp_env_vars_info_json", JSON),
    ColumnSpec("mcp_general_notes_json", JSON),
    ColumnSpec("dev_debug_methods_json", JSON),
    ColumnSpec("dev_support_channels_json", JSON),
    ColumnSpec("dev_contribution_guidelines_url_or_text", TEXT),
    ColumnSpec("security_compliance_json", JSON),
    ColumnSpec("security_auth_methods_json", JSON),
    ColumnSpec("security_data_privacy_json", JSON),
    ColumnSpec("security_best_practices_json", JSON),
    ColumnSpec("examples_use_cases_json", JSON),
    ColumnSpec("examples_workflows_json", JSON),
    ColumnSpec("examples_recipes_json", JSON),
    ColumnSpec("examples_playground_snippets_json", JSON),
    ColumnSpec("meta_miscellaneous_details_json", JSON),
)

COLUMNS_BY_NAME: dict[str, ColumnSpec] = {c.name: c for c in COLUMNS}

# Raw field holding the multi-valued server type hints
SERVER_TYPE_HINTS = "mcp_server_type_json"
SCORING = "scoring"

# A row missing any of these is rejected by the loader
MANDATORY_COLUMNS: tuple[str, ...] = ("mcp_name", "provider_name", "tools_definitions_json")

# Column whose value identifies a row for duplicate suppression
KEY_COLUMN = "mcp_name"


def max_lengths() -> dict[str, int]:
    """Declared limit per fixed-width column."""
    return {c.name: c.max_length for c in COLUMNS if c.kind == VARCHAR and c.max_length}
