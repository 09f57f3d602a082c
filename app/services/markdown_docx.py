"""Markdown to DOCX conversion.

The converter is split in two steps: ``parse_markdown`` scans the text line by
line into ``Block`` values, and ``render_docx`` writes those blocks into a Word
document with python-docx.

Supported block kinds, checked in this order for every line: blank line,
ATX heading (``#`` to ``######``), fenced code block, blockquote, paragraph.
Paragraph text understands ``**bold**``/``__bold__``, ``*italic*``/``_italic_``
and ```code``` spans; anything else is literal text.
"""

import io
import re
from dataclasses import dataclass, field
from enum import Enum

from docx import Document as DocxDocument
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Pt

DOCX_MEDIA_TYPE = (
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
)

CODE_FONT = "Courier New"
CODE_FONT_SIZE = Pt(10)
INLINE_CODE_FILL = "F0F0F0"
QUOTE_BORDER_COLOR = "999999"

_HEADING_RE = re.compile(r"^(#{1,6})\s+(.+)$")
_QUOTE_PREFIX_RE = re.compile(r"^\s*>\s*")
_BOLD_RE = re.compile(r"(\*\*|__)(.*?)\1")
_ITALIC_RE = re.compile(r"(\*|_)(.*?)\1")
_CODE_RE = re.compile(r"`([^`]+)`")
_SPECIAL_RE = re.compile(r"[*_`]")

FENCE = "```"


class BlockKind(str, Enum):
    EMPTY = "empty"
    HEADING = "heading"
    CODE = "code"
    QUOTE = "quote"
    PARAGRAPH = "paragraph"


@dataclass
class Run:
    """A span of text sharing one set of character formats."""

    text: str
    bold: bool = False
    italic: bool = False
    code: bool = False


@dataclass
class Block:
    """One output paragraph."""

    kind: BlockKind
    runs: list[Run] = field(default_factory=list)
    level: int | None = None

    @property
    def text(self) -> str:
        return "".join(run.text for run in self.runs)


def parse_inline(text: str) -> list[Run]:
    """Split a paragraph line into formatted runs.

    Spans are matched greedily from left to right and never overlap. At each
    position bold wins over italic, and italic over inline code. Delimiter
    characters that do not open a span are kept as plain text, and adjacent
    plain text is merged into a single run.
    """
    runs: list[Run] = []
    plain: list[str] = []

    def flush() -> None:
        if plain:
            runs.append(Run("".join(plain)))
            plain.clear()

    i = 0
    while i < len(text):
        match = _BOLD_RE.match(text, i)
        if match:
            flush()
            runs.append(Run(match.group(2), bold=True))
            i = match.end()
            continue

        match = _ITALIC_RE.match(text, i)
        if match and match.end() - i > 2:
            flush()
            runs.append(Run(match.group(2), italic=True))
            i = match.end()
            continue

        match = _CODE_RE.match(text, i)
        if match:
            flush()
            runs.append(Run(match.group(1), code=True))
            i = match.end()
            continue

        if _SPECIAL_RE.match(text, i):
            # unmatched delimiter
            plain.append(text[i])
            i += 1
            continue

        special = _SPECIAL_RE.search(text, i)
        end = special.start() if special else len(text)
        plain.append(text[i:end])
        i = end

    flush()
    return runs or [Run("")]


def parse_markdown(content: str) -> list[Block]:
    """Scan Markdown text into a flat list of blocks."""
    blocks: list[Block] = []
    lines = content.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    i = 0

    while i < len(lines):
        line = lines[i]
        stripped = line.strip()

        if stripped == "":
            blocks.append(Block(BlockKind.EMPTY))
            i += 1
            continue

        heading = _HEADING_RE.match(line)
        if heading:
            blocks.append(
                Block(
                    BlockKind.HEADING,
                    runs=[Run(heading.group(2))],
                    level=len(heading.group(1)),
                )
            )
            i += 1
            continue

        if stripped.startswith(FENCE):
            code_lines = []
            i += 1
            while i < len(lines) and not lines[i].strip().startswith(FENCE):
                code_lines.append(lines[i])
                i += 1
            blocks.append(Block(BlockKind.CODE, runs=[Run("\n".join(code_lines), code=True)]))
            # skip the closing fence
            i += 1
            continue

        if stripped.startswith(">"):
            quote = _QUOTE_PREFIX_RE.sub("", line, count=1)
            blocks.append(Block(BlockKind.QUOTE, runs=[Run(quote, italic=True)]))
            i += 1
            continue

        blocks.append(Block(BlockKind.PARAGRAPH, runs=parse_inline(line)))
        i += 1

    return blocks


def _set_spacing(paragraph, before: int = 0, after: int = 0) -> None:
    paragraph.paragraph_format.space_before = Pt(before)
    paragraph.paragraph_format.space_after = Pt(after)


def _shade_run(run, fill: str) -> None:
    r_pr = run._r.get_or_add_rPr()
    shd = OxmlElement("w:shd")
    shd.set(qn("w:val"), "clear")
    shd.set(qn("w:color"), "auto")
    shd.set(qn("w:fill"), fill)
    r_pr.append(shd)


def _add_left_border(paragraph, color: str) -> None:
    p_pr = paragraph._p.get_or_add_pPr()
    p_bdr = OxmlElement("w:pBdr")
    left = OxmlElement("w:left")
    left.set(qn("w:val"), "single")
    left.set(qn("w:sz"), "6")
    left.set(qn("w:space"), "1")
    left.set(qn("w:color"), color)
    p_bdr.append(left)
    p_pr.append(p_bdr)


def _add_run(paragraph, run: Run):
    docx_run = paragraph.add_run(run.text)
    if run.bold:
        docx_run.bold = True
    if run.italic:
        docx_run.italic = True
    if run.code:
        docx_run.font.name = CODE_FONT
    return docx_run


def render_docx(blocks: list[Block], title: str | None = None) -> bytes:
    """Write blocks into a DOCX file and return its bytes.

    When ``title`` is given it is emitted first as a level-1 heading.
    """
    document = DocxDocument()

    if title is not None:
        heading = document.add_heading(title or "Untitled Document", level=1)
        _set_spacing(heading, after=20)

    for block in blocks:
        if block.kind is BlockKind.EMPTY:
            document.add_paragraph("")

        elif block.kind is BlockKind.HEADING:
            paragraph = document.add_heading(block.text, level=block.level or 1)
            _set_spacing(paragraph, before=10, after=10)

        elif block.kind is BlockKind.CODE:
            paragraph = document.add_paragraph()
            for run in block.runs:
                docx_run = _add_run(paragraph, run)
                docx_run.font.size = CODE_FONT_SIZE
            _set_spacing(paragraph, before=5, after=5)

        elif block.kind is BlockKind.QUOTE:
            paragraph = document.add_paragraph()
            for run in block.runs:
                _add_run(paragraph, run)
            # pBdr precedes spacing in pPr
            _add_left_border(paragraph, QUOTE_BORDER_COLOR)
            _set_spacing(paragraph, before=5, after=5)

        else:
            paragraph = document.add_paragraph()
            for run in block.runs:
                docx_run = _add_run(paragraph, run)
                if run.code:
                    _shade_run(docx_run, INLINE_CODE_FILL)
            _set_spacing(paragraph, after=5)

    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def markdown_to_docx(content: str, title: str | None = None) -> bytes:
    """Convert Markdown text to DOCX bytes."""
    return render_docx(parse_markdown(content), title=title)
