"""SQLModel table definitions for the per-project document store."""

import json

from sqlmodel import Field, SQLModel


class DocumentRow(SQLModel, table=True):
    """One stored document: opaque text plus a flat string-keyed metadata map."""

    __tablename__ = "documents"

    id: str = Field(primary_key=True)
    type: str = Field(default="", index=True)  # copied from metadata["type"]
    content: str = ""
    metadata_json: str = "{}"
    created_at: float = Field(default=0.0, index=True)

    def get_metadata(self) -> dict[str, str]:
        """Parse metadata_json to a dict."""
        data = json.loads(self.metadata_json) if self.metadata_json else {}
        return {str(k): "" if v is None else str(v) for k, v in data.items()}
