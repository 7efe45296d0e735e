"""Tests for document.markdown.parse_markdown()."""

from document.markdown import Node, parse_markdown


class TestParseMarkdown:
    def test_headings(self):
        nodes = parse_markdown("# One\n### Three\n###### Six")
        assert nodes == [
            Node("heading", "One", level=1),
            Node("heading", "Three", level=3),
            Node("heading", "Six", level=6),
        ]

    def test_heading_needs_space(self):
        assert parse_markdown("#hashtag") == [Node("paragraph", "#hashtag")]

    def test_seven_hashes_is_paragraph(self):
        assert parse_markdown("####### too deep")[0].kind == "paragraph"

    def test_fenced_code(self):
        nodes = parse_markdown("```python\nx = 1\n\ny = 2\n```\nafter")
        assert nodes == [Node("code", "x = 1\n\ny = 2"), Node("paragraph", "after")]

    def test_markers_inside_code_are_literal(self):
        nodes = parse_markdown("```\n# not a heading\n> not a quote\n```")
        assert nodes == [Node("code", "# not a heading\n> not a quote")]

    def test_unterminated_fence_runs_to_end(self):
        nodes = parse_markdown("intro\n```\nline 1\nline 2")
        assert nodes == [Node("paragraph", "intro"), Node("code", "line 1\nline 2")]

    def test_single_line_fence(self):
        assert parse_markdown("```inline code```") == [Node("code", "inline code")]

    def test_blockquote(self):
        assert parse_markdown("> quoted") == [Node("blockquote", "quoted")]

    def test_blank_lines(self):
        nodes = parse_markdown("a\n\n   \nb")
        assert [n.kind for n in nodes] == ["paragraph", "blank", "blank", "paragraph"]

    def test_inline_markup_stays_literal(self):
        line = "Use **bold** and [links](http://x) - item"
        assert parse_markdown(line) == [Node("paragraph", line)]

    def test_empty_input(self):
        assert parse_markdown("") == []
