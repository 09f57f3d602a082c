"""Gateway to the generative text API (Gemini)."""

import asyncio
import logging
import re
from enum import Enum

from google import genai
from google.genai import types

from app.config import settings
from app.core.errors import AIServiceError

logger = logging.getLogger(__name__)

REFINE_INSTRUCTIONS = """You are a Markdown formatter. Clean and improve the input Markdown while preserving meaning.
- Keep headings hierarchy consistent.
- Fix bullet/numbered lists indentation.
- Normalize spacing and blank lines.
- Preserve code fences and language hints.
- Keep links and inline code intact.
- Do not add new content beyond light formatting.
Return only valid Markdown."""

DIAGRAM_INSTRUCTIONS = """You are a diagram generator. Turn the user's description into a Mermaid {kind} diagram.
- Use valid Mermaid syntax that starts with the `{keyword}` declaration.
- Keep node labels short and quote labels that contain punctuation.
- Do not explain the diagram.
Return only the Mermaid code, without Markdown code fences."""

_FENCE_RE = re.compile(r"^\s*```[\w-]*\s*\n(.*?)\n?\s*```\s*$", re.DOTALL)


class DiagramType(str, Enum):
    """Mermaid diagram kinds the generator accepts."""

    FLOWCHART = "flowchart"
    SEQUENCE = "sequence"
    CLASS = "class"
    STATE = "state"
    ER = "er"
    GANTT = "gantt"
    MINDMAP = "mindmap"
    PIE = "pie"


MERMAID_KEYWORDS: dict[DiagramType, str] = {
    DiagramType.FLOWCHART: "flowchart TD",
    DiagramType.SEQUENCE: "sequenceDiagram",
    DiagramType.CLASS: "classDiagram",
    DiagramType.STATE: "stateDiagram-v2",
    DiagramType.ER: "erDiagram",
    DiagramType.GANTT: "gantt",
    DiagramType.MINDMAP: "mindmap",
    DiagramType.PIE: "pie",
}


def strip_code_fence(text: str) -> str:
    """Remove a single surrounding Markdown code fence, if present."""
    match = _FENCE_RE.match(text)
    if match:
        return match.group(1).strip()
    return text.strip()


class AIService:
    """Wraps the Gemini client; the client is created on first use."""

    def __init__(self, api_key: str | None = None, model: str | None = None):
        self.api_key = api_key if api_key is not None else settings.GEMINI_API_KEY
        self.model = model or settings.GEMINI_MODEL
        self._client: genai.Client | None = None

    def _get_client(self) -> genai.Client:
        if not self.api_key:
            raise AIServiceError("GEMINI_API_KEY is not configured")
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    async def _generate(self, prompt: str) -> str:
        client = self._get_client()
        try:
            response = await asyncio.to_thread(
                client.models.generate_content,
                model=self.model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    temperature=settings.AI_TEMPERATURE,
                    max_output_tokens=settings.AI_MAX_OUTPUT_TOKENS,
                ),
            )
        except Exception as e:
            logger.error("Gemini request failed: %s", e)
            raise AIServiceError("AI request failed", error=str(e))

        text = (response.text or "").strip()
        if not text:
            raise AIServiceError("Failed to generate content")
        return text

    async def refine(self, content: str) -> str:
        """Return a cleaned-up version of ``content``."""
        prompt = f"{REFINE_INSTRUCTIONS}\n\n---\n\n{content}"
        refined = await self._generate(prompt)
        logger.info("Refined markdown (%d -> %d chars)", len(content), len(refined))
        return refined

    async def generate_diagram(
        self, prompt: str, diagram_type: DiagramType = DiagramType.FLOWCHART
    ) -> str:
        """Return Mermaid source for the described diagram."""
        instructions = DIAGRAM_INSTRUCTIONS.format(
            kind=diagram_type.value, keyword=MERMAID_KEYWORDS[diagram_type]
        )
        code = strip_code_fence(await self._generate(f"{instructions}\n\n---\n\n{prompt}"))
        if not code:
            raise AIServiceError("Failed to generate diagram")
        return code


ai_service = AIService()


def get_ai_service() -> AIService:
    """Dependency providing the shared AI service."""
    return ai_service
