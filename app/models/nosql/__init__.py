"""MongoDB models package."""

from app.models.nosql.content import DocumentContent, content_ref_for

__all__ = ["DocumentContent", "content_ref_for"]
