"""Document content model for MongoDB."""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


def content_ref_for(doc_id: str) -> str:
    """Reference path recorded on the relational row for a stored body."""
    return f"documents/{doc_id}/content"


class DocumentContent(BaseModel):
    """Markdown body of a document, keyed by the document id."""

    model_config = ConfigDict(populate_by_name=True)

    doc_id: str = Field(..., alias="_id")
    content: str = ""
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    def to_mongo(self) -> dict[str, Any]:
        """Convert to MongoDB document format."""
        return self.model_dump(by_alias=True)

    @classmethod
    def from_mongo(cls, data: dict[str, Any]) -> "DocumentContent":
        """Create from MongoDB document."""
        data = dict(data)
        data["_id"] = str(data["_id"])
        return cls(**data)
