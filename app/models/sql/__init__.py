"""SQLAlchemy models package."""

from app.models.sql.board import BoardColumn, Project, Task
from app.models.sql.document import Document
from app.models.sql.feature import Feature
from app.models.sql.user import User

__all__ = ["User", "Document", "Feature", "Project", "BoardColumn", "Task"]
