"""Tests for prompt construction."""

import pytest

from techscout_api.errors import InvalidActionError, ValidationError
from techscout_api.prompts import (
    SECTION_HEADERS,
    PromptBuilder,
    topic_from_filename,
    topic_from_url,
)


def _header_positions(prompt: str) -> list[int]:
    return [prompt.index(header) for header in SECTION_HEADERS]


class TestLabels:
    """Tests for report label derivation."""

    @pytest.mark.parametrize(
        "filename,expected",
        [
            ("edge_computing-notes.pdf", "edge computing notes"),
            ("report.v2.docx", "report.v2"),
            ("README", "README"),
            ("quantum_sensing.TXT", "quantum sensing"),
        ],
    )
    def test_topic_from_filename(self, filename, expected):
        assert topic_from_filename(filename) == expected

    @pytest.mark.parametrize(
        "url,expected",
        [
            ("https://www.example.com/post", "example.com - Technology Analysis"),
            ("http://blog.example.org", "blog.example.org - Technology Analysis"),
            ("https://News.Example.com:8443/a?b=c", "news.example.com - Technology Analysis"),
        ],
    )
    def test_topic_from_url(self, url, expected):
        assert topic_from_url(url) == expected


class TestAnalysisPrompts:
    """Tests for the three analysis templates."""

    def test_topic_prompt(self):
        prompt = PromptBuilder().topic_prompt("Edge computing")

        assert 'Analyze the technology topic: "Edge computing"' in prompt
        positions = _header_positions(prompt)
        assert positions == sorted(positions)

    def test_headers_followed_by_bracketed_instruction(self):
        prompt = PromptBuilder().topic_prompt("Edge computing")
        for header in SECTION_HEADERS:
            after = prompt.split(header, 1)[1]
            assert after.startswith("\n[")

    def test_document_prompt_short_text(self):
        prompt = PromptBuilder().document_prompt("notes.txt", "Short body")

        assert "Document: notes.txt" in prompt
        assert "Content: Short body\n" in prompt
        assert " ..." not in prompt.split("Content:", 1)[1].split("\n", 1)[0]
        positions = _header_positions(prompt)
        assert positions == sorted(positions)

    def test_document_prompt_truncates_with_marker(self):
        builder = PromptBuilder(max_content_chars=10)
        prompt = builder.document_prompt("notes.txt", "abcdefghijKLMNOP")

        assert "Content: abcdefghij ...\n" in prompt
        assert "KLMNOP" not in prompt

    def test_url_prompt_truncates_without_marker(self):
        builder = PromptBuilder(max_content_chars=10)
        prompt = builder.url_prompt("https://example.com", "abcdefghijKLMNOP")

        assert "URL: https://example.com" in prompt
        assert "Content: abcdefghij\n" in prompt
        positions = _header_positions(prompt)
        assert positions == sorted(positions)

    def test_truncate_at_limit_unchanged(self):
        builder = PromptBuilder(max_content_chars=5)
        assert builder.truncate("abcde", " ...") == "abcde"
        assert builder.truncate("abcdef", " ...") == "abcde ..."


class TestRefinePrompts:
    """Tests for section rewrite templates."""

    def test_simplify(self):
        prompt = PromptBuilder().refine_prompt(
            "simplify", "Quantum supremacy denotes...", "Quantum computing"
        )
        assert prompt.startswith('Please simplify the following text about "Quantum computing".')
        assert "\n\nQuantum supremacy denotes...\n\n" in prompt
        assert prompt.endswith("Simplified version:")

    @pytest.mark.parametrize(
        "action,ending",
        [("refine", "Refined version:"), ("expand", "Expanded version:")],
    )
    def test_other_actions(self, action, ending):
        prompt = PromptBuilder().refine_prompt(action, "Text", "Topic")
        assert '"Topic"' in prompt
        assert prompt.endswith(ending)

    def test_braces_in_content_are_literal(self):
        prompt = PromptBuilder().refine_prompt("refine", "use {curly} braces", "{ctx}")
        assert "use {curly} braces" in prompt
        assert '"{ctx}"' in prompt

    def test_invalid_action(self):
        with pytest.raises(InvalidActionError) as exc_info:
            PromptBuilder().refine_prompt("translate", "Text", "Topic")
        assert isinstance(exc_info.value, ValidationError)
        assert exc_info.value.status_code == 400
