"""Read-only post-run checks over the servers table."""

import json
import logging
from dataclasses import dataclass, field
from typing import Optional

from registry_loader.mapping.columns import COLUMNS, VARCHAR
from registry_loader.store.sqlite_store import SQLiteServerStore

logger = logging.getLogger(__name__)

GROUPABLE_COLUMNS: frozenset[str] = frozenset(
    {c.name for c in COLUMNS if c.kind == VARCHAR} | {"server_type", "hosting_type"}
)

AVERAGED_COLUMNS: tuple[str, ...] = ("tools_count", "repo_stargazers_count", "repo_forks_count")


@dataclass
class ValidationReport:
    """Aggregate view of the destination after a run."""

    total: int = 0
    active: int = 0
    unique_providers: int = 0
    server_type_distribution: dict[str, int] = field(default_factory=dict)
    hosting_type_distribution: dict[str, int] = field(default_factory=dict)
    averages: dict[str, Optional[float]] = field(default_factory=dict)
    group_by: str = "provider_name"
    top_groups: list[tuple[str, int]] = field(default_factory=list)
    integrity: dict[str, int] = field(default_factory=dict)
    name_length: dict[str, Optional[float]] = field(default_factory=dict)
    tools_count_mismatches: list[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        """Every row has a name and a provider."""
        return (
            self.total > 0
            and self.integrity.get("with_name") == self.total
            and self.integrity.get("with_provider") == self.total
        )

    def render(self) -> str:
        """Printable multi-line summary."""
        lines = [
            f"Total servers: {self.total}",
            f"  Active: {self.active}",
            f"  Unique providers: {self.unique_providers}",
        ]
        for column, value in self.averages.items():
            shown = f"{value:.2f}" if value is not None else "n/a"
            lines.append(f"  Average {column}: {shown}")
        lines.append("Server type distribution:")
        lines.extend(f"  {k}: {v}" for k, v in self.server_type_distribution.items())
        lines.append("Hosting type distribution:")
        lines.extend(f"  {k}: {v}" for k, v in self.hosting_type_distribution.items())
        lines.append(f"Top {len(self.top_groups)} by {self.group_by}:")
        lines.extend(f"  {k}: {v}" for k, v in self.top_groups)
        lines.append(
            "Integrity: {with_name} named, {with_provider} with provider, "
            "{with_tools} with tools".format(**self.integrity)
            if self.integrity
            else "Integrity: n/a"
        )
        if self.name_length.get("max") is not None:
            lines.append(
                f"Name length: min {self.name_length['min']:.0f}, max {self.name_length['max']:.0f}, "
                f"avg {self.name_length['avg']:.1f}"
            )
        if self.tools_count_mismatches:
            lines.append(f"Tools count mismatches: {len(self.tools_count_mismatches)}")
            lines.extend(f"  {name}" for name in self.tools_count_mismatches[:10])
        lines.append("All validations passed" if self.complete else "Some validation issues detected")
        return "\n".join(lines)


class ValidationReporter:
    """Runs aggregate queries against a store. Never writes."""

    def __init__(self, store: SQLiteServerStore):
        self.store = store

    def report(self, *, top_n: int = 5, group_by: str = "provider_name") -> ValidationReport:
        if group_by not in GROUPABLE_COLUMNS:
            raise ValueError(f"Cannot group by {group_by!r}. Choose one of: {sorted(GROUPABLE_COLUMNS)}")

        summary = self.store.query(
            """
            SELECT
                COUNT(*) AS total,
                COUNT(CASE WHEN metadata_is_active = 1 THEN 1 END) AS active,
                COUNT(DISTINCT provider_name) AS unique_providers,
                COUNT(mcp_name) AS with_name,
                COUNT(provider_name) AS with_provider,
                COUNT(tools_definitions_json) AS with_tools,
                MIN(LENGTH(mcp_name)) AS name_min,
                MAX(LENGTH(mcp_name)) AS name_max,
                AVG(LENGTH(mcp_name)) AS name_avg
            FROM servers
            """
        )[0]

        averages_sql = ", ".join(f"AVG({c}) AS {c}" for c in AVERAGED_COLUMNS)
        averages_row = self.store.query(f"SELECT {averages_sql} FROM servers")[0]

        report = ValidationReport(
            total=summary["total"],
            active=summary["active"],
            unique_providers=summary["unique_providers"],
            server_type_distribution=self._distribution("server_type"),
            hosting_type_distribution=self._distribution("hosting_type"),
            averages={c: averages_row[c] for c in AVERAGED_COLUMNS},
            group_by=group_by,
            top_groups=self._top(group_by, top_n),
            integrity={
                "with_name": summary["with_name"],
                "with_provider": summary["with_provider"],
                "with_tools": summary["with_tools"],
            },
            name_length={
                "min": summary["name_min"],
                "max": summary["name_max"],
                "avg": summary["name_avg"],
            },
            tools_count_mismatches=self._tools_count_mismatches(),
        )
        logger.info("Validation: %d rows, complete=%s", report.total, report.complete)
        return report

    def _distribution(self, column: str) -> dict[str, int]:
        rows = self.store.query(
            f"SELECT {column} AS value, COUNT(*) AS n FROM servers GROUP BY {column} ORDER BY n DESC, value"
        )
        return {r["value"]: r["n"] for r in rows}

    def _top(self, column: str, top_n: int) -> list[tuple[str, int]]:
        rows = self.store.query(
            f"""
            SELECT {column} AS value, COUNT(*) AS n FROM servers
            WHERE {column} IS NOT NULL
            GROUP BY {column} ORDER BY n DESC, value LIMIT ?
            """,
            (top_n,),
        )
        return [(r["value"], r["n"]) for r in rows]

    def _tools_count_mismatches(self) -> list[str]:
        """Rows whose declared tools_count differs from their tool definitions."""
        mismatches: list[str] = []
        rows = self.store.query("SELECT mcp_name, tools_count, tools_definitions_json FROM servers")
        for r in rows:
            try:
                tools = json.loads(r["tools_definitions_json"] or "null")
            except ValueError:
                continue
            if isinstance(tools, list) and (r["tools_count"] or 0) != len(tools):
                mismatches.append(r["mcp_name"])
        return mismatches
