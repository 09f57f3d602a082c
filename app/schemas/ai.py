"""AI endpoint schemas."""

from pydantic import BaseModel, Field

from app.services.ai_service import DiagramType


class RefineRequest(BaseModel):
    content: str = ""


class RefineData(BaseModel):
    content: str


class DiagramRequest(BaseModel):
    prompt: str = ""
    type: DiagramType = DiagramType.FLOWCHART


class DiagramData(BaseModel):
    code: str
    type: DiagramType = Field(...)
