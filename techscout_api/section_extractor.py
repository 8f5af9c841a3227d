"""Split a free-text model reply into the five report sections.

The reply is scanned line by line for the section markers the analysis
prompts request. When no marker yields any content, the reply is split into
paragraphs and assigned to sections by position instead. Any section still
empty after that gets a fixed placeholder, so callers always receive five
non-empty strings.
"""

from dataclasses import dataclass
from typing import Literal

# (field, marker phrase) in report order; the bolded form is "**<phrase>**".
SECTION_MARKERS: tuple[tuple[str, str], ...] = (
    ("summary", "Technology Overview:"),
    ("market_trends", "Market Trends:"),
    ("key_players", "Key Players:"),
    ("use_cases", "Use Cases:"),
    ("challenges", "Challenges:"),
)

PLACEHOLDERS: dict[str, str] = {
    "summary": "Analysis not available for this section.",
    "market_trends": "Market trends analysis not available.",
    "key_players": "Key players information not available.",
    "use_cases": "Use cases information not available.",
    "challenges": "Challenges analysis not available.",
}

# Paragraph slices used by the positional fallback, keyed by field.
POSITIONAL_SLICES: dict[str, slice] = {
    "summary": slice(0, 2),
    "market_trends": slice(2, 4),
    "key_players": slice(4, 6),
    "use_cases": slice(6, 8),
    "challenges": slice(8, None),
}

PARAGRAPH_BREAK = "\n\n"

Strategy = Literal["markers", "positional"]


@dataclass(frozen=True)
class ExtractedSections:
    """The five report sections plus the strategy that produced them."""

    summary: str
    market_trends: str
    key_players: str
    use_cases: str
    challenges: str
    strategy: Strategy

    def as_fields(self) -> dict[str, str]:
        """Section texts keyed by AnalysisRecord field name."""
        return {field: getattr(self, field) for field, _ in SECTION_MARKERS}


def match_marker(line: str) -> str | None:
    """Return the field whose marker appears in line, or None."""
    for field, phrase in SECTION_MARKERS:
        if f"**{phrase}**" in line or phrase in line:
            return field
    return None


class SectionExtractor:
    """Stateless parser from model reply text to ExtractedSections."""

    def extract(self, content: str) -> ExtractedSections:
        sections = self._extract_by_markers(content)
        strategy: Strategy = "markers"

        if not any(sections.values()):
            sections = self._extract_by_position(content)
            strategy = "positional"

        filled = {field: sections[field] or PLACEHOLDERS[field] for field, _ in SECTION_MARKERS}
        return ExtractedSections(strategy=strategy, **filled)

    def _extract_by_markers(self, content: str) -> dict[str, str]:
        sections = {field: "" for field, _ in SECTION_MARKERS}
        current: str | None = None
        buffer = ""

        for line in content.split("\n"):
            stripped = line.strip()
            field = match_marker(stripped)

            if field is not None:
                if current and buffer:
                    sections[current] = buffer.strip()
                current = field
                buffer = ""
            elif current and stripped:
                buffer += line + "\n"

        if current and buffer:
            sections[current] = buffer.strip()

        return sections

    def _extract_by_position(self, content: str) -> dict[str, str]:
        paragraphs = content.split(PARAGRAPH_BREAK)
        return {
            field: PARAGRAPH_BREAK.join(paragraphs[POSITIONAL_SLICES[field]])
            for field, _ in SECTION_MARKERS
        }


def extract_sections(content: str) -> ExtractedSections:
    """Parse content with a default SectionExtractor."""
    return SectionExtractor().extract(content)
