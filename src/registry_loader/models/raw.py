"""Raw import record representation before mapping."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class RawRecord(BaseModel):
    """
    Untyped record from an import batch.
    Values are scalars or legacy-formatted strings; nothing is validated here.
    """

    model_config = ConfigDict(frozen=True)

    data: dict[str, Any] = Field(default_factory=dict)
    position: int = Field(default=0, description="Zero-based index in the input batch")

    @property
    def name(self) -> Optional[str]:
        """Identifying name, when the record carries one."""
        value = self.data.get("mcp_name")
        return str(value) if value not in (None, "") else None

    @property
    def label(self) -> str:
        """Best-effort identifier for log lines."""
        return self.name or f"<record {self.position + 1}>"
