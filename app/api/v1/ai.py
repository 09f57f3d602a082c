"""AI endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.deps import get_current_principal
from app.schemas.ai import DiagramData, DiagramRequest, RefineData, RefineRequest
from app.schemas.auth import Principal
from app.schemas.common import ApiResponse
from app.services.ai_service import AIService, get_ai_service

router = APIRouter()


@router.post(
    "/refine",
    response_model=ApiResponse[RefineData],
    summary="Refine Markdown content",
)
async def refine(
    request: RefineRequest,
    principal: Principal = Depends(get_current_principal),
    ai: AIService = Depends(get_ai_service),
) -> ApiResponse[RefineData]:
    """Clean up Markdown formatting with the AI model."""
    if not request.content.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Content is required",
        )

    refined = await ai.refine(request.content)
    return ApiResponse(data=RefineData(content=refined))


@router.post(
    "/generate-diagram",
    response_model=ApiResponse[DiagramData],
    summary="Generate Mermaid diagram code",
)
async def generate_diagram(
    request: DiagramRequest,
    principal: Principal = Depends(get_current_principal),
    ai: AIService = Depends(get_ai_service),
) -> ApiResponse[DiagramData]:
    """Turn a description into Mermaid code."""
    if not request.prompt.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Prompt is required",
        )

    code = await ai.generate_diagram(request.prompt, request.type)
    return ApiResponse(data=DiagramData(code=code, type=request.type))
