"""Typed destination row for the servers table."""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class ServerType(str, Enum):
    """Execution model accepted by the server_type column."""

    LOCAL = "LOCAL"
    HTTP_STREAM = "HTTP_STREAM"
    SSE = "SSE"


class HostingType(str, Enum):
    """Hosting model accepted by the hosting_type column."""

    EXTERNAL = "EXTERNAL"
    FIRST_PARTY_HOSTED = "FIRST_PARTY_HOSTED"


class MappedRow(BaseModel):
    """
    One constraint-safe row ready for insertion.

    Only columns passed to the constructor count as defined (pydantic tracks
    them in model_fields_set); an explicit None is defined, an omitted column
    is not and is left to the store default on insert.
    """

    metadata_record_created_at: Optional[str] = None
    metadata_record_updated_at: Optional[str] = None
    metadata_is_active: Optional[bool] = None

    mcp_name: Optional[str] = None
    mcp_description: Optional[str] = None
    mcp_purpose: Optional[str] = None
    mcp_server_primary_category: Optional[str] = None
    mcp_server_secondary_categories_json: Optional[str] = None
    mcp_server_maturity_indicator: Optional[str] = None
    mcp_integration_complexity_indicator: Optional[str] = None

    app_domain: Optional[str] = None
    app_slug: Optional[str] = None
    app_description: Optional[str] = None

    provider_name: Optional[str] = None
    provider_is_official: Optional[bool] = None

    meta_source_data_last_updated: Optional[str] = None
    meta_declared_license: Optional[str] = None
    meta_information_sources: Optional[str] = None

    server_type: ServerType = ServerType.LOCAL
    hosting_type: HostingType = HostingType.EXTERNAL
    mcp_server_type_json: Optional[str] = None
    mcp_features_json: Optional[str] = None
    mcp_requirements_json: Optional[str] = None

    tools_overview_description: Optional[str] = None
    tools_count: Optional[int] = None
    tools_distinct_categories_count: Optional[int] = None
    tools_definitions_json: Optional[str] = None

    repo_platform: Optional[str] = None
    repo_owner_login: Optional[str] = None
    repo_owner_avatar_url: Optional[str] = None
    repo_full_name: Optional[str] = None
    repo_stargazers_count: Optional[int] = None
    repo_watchers_count: Optional[int] = None
    repo_forks_count: Optional[int] = None
    repo_primary_language: Optional[str] = None
    repo_description: Optional[str] = None
    repo_html_url: Optional[str] = None
    repo_license_name: Optional[str] = None
    repo_license_spdx_id: Optional[str] = None
    repo_topics_json: Optional[str] = None
    repo_created_at: Optional[str] = None
    repo_updated_at: Optional[str] = None
    repo_last_push_at: Optional[str] = None
    repo_open_issues_count: Optional[int] = None
    repo_has_issues_enabled: Optional[bool] = None
    repo_has_projects_enabled: Optional[bool] = None
    repo_has_wiki_enabled: Optional[bool] = None
    repo_has_discussions_enabled: Optional[bool] = None
    repo_is_archived: Optional[bool] = None
    repo_is_disabled: Optional[bool] = None
    repo_file_tree_text: Optional[str] = None

    mcp_env_vars_info_json: Optional[str] = None
    mcp_general_notes_json: Optional[str] = None
    dev_debug_methods_json: Optional[str] = None
    dev_support_channels_json: Optional[str] = None
    dev_contribution_guidelines_url_or_text: Optional[str] = None
    security_compliance_json: Optional[str] = None
    security_auth_methods_json: Optional[str] = None
    security_data_privacy_json: Optional[str] = None
    security_best_practices_json: Optional[str] = None
    examples_use_cases_json: Optional[str] = None
    examples_workflows_json: Optional[str] = None
    examples_recipes_json: Optional[str] = None
    examples_playground_snippets_json: Optional[str] = None
    meta_miscellaneous_details_json: Optional[str] = None

    scoring: Optional[str] = Field(default=None, description="Scoring block as JSON text")

    @property
    def key(self) -> Optional[str]:
        """Identifying key used for duplicate suppression."""
        return self.mcp_name

    @property
    def defined_columns(self) -> frozenset[str]:
        """Columns that carry a value, including explicit nulls."""
        return frozenset(self.model_fields_set)

    def insert_values(self) -> dict[str, Any]:
        """Column -> value for the INSERT statement, defined columns only."""
        return self.model_dump(mode="json", include=set(self.model_fields_set))
