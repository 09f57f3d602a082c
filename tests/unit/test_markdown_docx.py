"""Unit tests for the Markdown to DOCX converter."""

import io

from docx import Document as DocxDocument

from app.services.markdown_docx import (
    Block,
    BlockKind,
    Run,
    markdown_to_docx,
    parse_inline,
    parse_markdown,
    render_docx,
)


class TestParseInline:
    """Tests for inline span parsing."""

    def test_plain_text(self):
        assert parse_inline("just words") == [Run("just words")]

    def test_bold_and_italic(self):
        runs = parse_inline("a **b** and *c*")

        assert runs == [
            Run("a "),
            Run("b", bold=True),
            Run(" and "),
            Run("c", italic=True),
        ]

    def test_underscore_delimiters(self):
        runs = parse_inline("__strong__ _soft_")

        assert runs == [Run("strong", bold=True), Run(" "), Run("soft", italic=True)]

    def test_inline_code(self):
        runs = parse_inline("run `make test` now")

        assert runs == [Run("run "), Run("make test", code=True), Run(" now")]

    def test_bold_wins_over_italic(self):
        assert parse_inline("**x**") == [Run("x", bold=True)]

    def test_unmatched_delimiter_is_literal(self):
        assert parse_inline("2 * 3 = 6") == [Run("2 * 3 = 6")]

    def test_lone_backtick_is_literal(self):
        assert parse_inline("a ` b") == [Run("a ` b")]

    def test_empty_pair_is_literal(self):
        assert parse_inline("**") == [Run("**")]

    def test_empty_line_gives_one_empty_run(self):
        assert parse_inline("") == [Run("")]


class TestParseMarkdown:
    """Tests for block scanning."""

    def test_block_sequence(self):
        content = "# Title\n\n```\ncode line\n```\n> quoted\ntext"

        blocks = parse_markdown(content)

        assert [b.kind for b in blocks] == [
            BlockKind.HEADING,
            BlockKind.EMPTY,
            BlockKind.CODE,
            BlockKind.QUOTE,
            BlockKind.PARAGRAPH,
        ]
        assert blocks[0].level == 1
        assert blocks[0].text == "Title"
        assert blocks[2].text == "code line"
        assert blocks[3].runs == [Run("quoted", italic=True)]
        assert blocks[4].text == "text"

    def test_heading_levels(self):
        blocks = parse_markdown("### Third\n###### Sixth")

        assert [(b.kind, b.level) for b in blocks] == [
            (BlockKind.HEADING, 3),
            (BlockKind.HEADING, 6),
        ]

    def test_seven_hashes_is_paragraph(self):
        blocks = parse_markdown("####### too deep")

        assert blocks[0].kind is BlockKind.PARAGRAPH
        assert blocks[0].text == "####### too deep"

    def test_heading_needs_space(self):
        blocks = parse_markdown("#hashtag")

        assert blocks[0].kind is BlockKind.PARAGRAPH

    def test_code_block_keeps_lines_verbatim(self):
        content = "```python\ndef f():\n    return **kwargs\n```"

        blocks = parse_markdown(content)

        assert len(blocks) == 1
        assert blocks[0].kind is BlockKind.CODE
        assert blocks[0].text == "def f():\n    return **kwargs"
        assert blocks[0].runs[0].code is True

    def test_unclosed_fence_runs_to_end(self):
        blocks = parse_markdown("```\na\nb")

        assert len(blocks) == 1
        assert blocks[0].text == "a\nb"

    def test_quote_without_space(self):
        blocks = parse_markdown(">tight")

        assert blocks[0].kind is BlockKind.QUOTE
        assert blocks[0].text == "tight"

    def test_whitespace_only_line_is_empty(self):
        blocks = parse_markdown("   ")

        assert blocks == [Block(BlockKind.EMPTY)]

    def test_empty_content(self):
        assert parse_markdown("") == [Block(BlockKind.EMPTY)]

    def test_crlf_line_endings(self):
        blocks = parse_markdown("# Title\r\n\r\nSome **bold**\r\n> quote\r\n")

        assert [b.kind for b in blocks] == [
            BlockKind.HEADING,
            BlockKind.EMPTY,
            BlockKind.PARAGRAPH,
            BlockKind.QUOTE,
            BlockKind.EMPTY,
        ]
        assert blocks[0].text == "Title"
        assert blocks[2].runs == [Run("Some "), Run("bold", bold=True)]
        assert blocks[3].text == "quote"
        assert all("\r" not in b.text for b in blocks)

    def test_crlf_code_block(self):
        blocks = parse_markdown("```\r\na = 1\r\nb = 2\r\n```")

        assert len(blocks) == 1
        assert blocks[0].text == "a = 1\nb = 2"


class TestRenderDocx:
    """Tests for the DOCX writer."""

    @staticmethod
    def _open(payload: bytes):
        return DocxDocument(io.BytesIO(payload))

    def test_output_is_a_zip_package(self):
        payload = markdown_to_docx("hello")

        assert payload[:2] == b"PK"

    def test_title_comes_first(self):
        document = self._open(markdown_to_docx("Body text", title="My Doc"))
        paragraphs = document.paragraphs

        assert paragraphs[0].text == "My Doc"
        assert paragraphs[0].style.name == "Heading 1"
        assert paragraphs[1].text == "Body text"

    def test_empty_title_falls_back(self):
        document = self._open(markdown_to_docx("x", title=""))

        assert document.paragraphs[0].text == "Untitled Document"

    def test_headings_use_heading_styles(self):
        document = self._open(markdown_to_docx("## Section"))

        assert document.paragraphs[0].text == "Section"
        assert document.paragraphs[0].style.name == "Heading 2"

    def test_inline_formats(self):
        document = self._open(markdown_to_docx("a **b** *c* `d`"))
        runs = document.paragraphs[0].runs

        assert [r.text for r in runs] == ["a ", "b", " ", "c", " ", "d"]
        assert runs[1].bold is True
        assert runs[3].italic is True
        assert runs[5].font.name == "Courier New"
        assert 'w:fill="F0F0F0"' in runs[5]._r.xml

    def test_code_block_font(self):
        document = self._open(markdown_to_docx("```\nprint(1)\n```"))
        run = document.paragraphs[0].runs[0]

        assert run.text == "print(1)"
        assert run.font.name == "Courier New"
        assert run.font.size.pt == 10

    def test_quote_has_left_border(self):
        document = self._open(markdown_to_docx("> note"))
        paragraph = document.paragraphs[0]

        assert paragraph.runs[0].italic is True
        assert "w:pBdr" in paragraph._p.xml

    def test_render_without_title(self):
        payload = render_docx([Block(BlockKind.PARAGRAPH, runs=[Run("only")])])

        assert [p.text for p in self._open(payload).paragraphs] == ["only"]
