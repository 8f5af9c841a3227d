"""Prompt templates for technology analysis and section refinement.

Every analysis prompt asks for the same five bolded headers, in the order
SectionExtractor maps them onto AnalysisRecord fields.
"""

import re
from urllib.parse import urlparse

from techscout_api.errors import InvalidActionError

# Header order is significant: the positional fallback relies on it.
SECTION_HEADERS: tuple[str, ...] = (
    "**Technology Overview:**",
    "**Market Trends:**",
    "**Key Players:**",
    "**Use Cases:**",
    "**Challenges:**",
)

URL_TOPIC_SUFFIX = " - Technology Analysis"

TRUNCATION_MARKER = " ..."


def _format_sections(instructions: tuple[str, str, str, str, str]) -> str:
    return "\n\n".join(
        f"{header}\n[{instruction}]" for header, instruction in zip(SECTION_HEADERS, instructions)
    )


_TOPIC_INSTRUCTIONS = (
    "Provide a detailed summary of what this technology is, its core principles, "
    "and its significance in the current technological landscape",
    "Analyze current market trends, adoption rates, growth projections, "
    "and emerging developments in this technology space",
    "Identify and describe the main companies, organizations, "
    "and thought leaders driving innovation in this field",
    "List and explain the primary applications, industries using this technology, "
    "and specific implementation examples",
    "Outline the main technical, economic, regulatory, "
    "or adoption challenges facing this technology",
)

_DOCUMENT_INSTRUCTIONS = (
    "Provide a detailed summary of the technology topics discussed in this document",
    "Analyze any market trends, business implications, or industry developments mentioned",
    "Identify companies, organizations, or individuals mentioned as important "
    "in this technology space",
    "Extract specific applications, implementations, or use cases described in the document",
    "Identify any challenges, limitations, or problems discussed regarding the technology",
)

_URL_INSTRUCTIONS = (
    "Provide a detailed summary of the technology topics discussed on this webpage",
    "Analyze any market trends, business implications, or industry developments mentioned",
    "Identify companies, organizations, or individuals mentioned as important "
    "in this technology space",
    "Extract specific applications, implementations, or use cases described",
    "Identify any challenges, limitations, or problems discussed regarding the technology",
)

_REFINE_TEMPLATES = {
    "refine": (
        'Please refine and improve the following text about "{context}". '
        "Make it more professional, accurate, and comprehensive while maintaining "
        "the same information structure:\n\n{content}\n\nRefined version:"
    ),
    "simplify": (
        'Please simplify the following text about "{context}". '
        "Make it easier to understand, use simpler language, and reduce complexity "
        "while keeping the key information:\n\n{content}\n\nSimplified version:"
    ),
    "expand": (
        'Please expand and provide more detail for the following text about "{context}". '
        "Add more context, examples, and comprehensive information:\n\n"
        "{content}\n\nExpanded version:"
    ),
}


def topic_from_filename(filename: str) -> str:
    """Derive a report label from an uploaded filename.

    >>> topic_from_filename("edge_computing-notes.pdf")
    'edge computing notes'
    """
    stem = re.sub(r"\.[^/.]+$", "", filename)
    return re.sub(r"[_-]", " ", stem)


def topic_from_url(url: str) -> str:
    """Derive a report label from a page URL's host."""
    host = urlparse(url).hostname or url
    if host.startswith("www."):
        host = host[4:]
    return host + URL_TOPIC_SUFFIX


class PromptBuilder:
    """Builds the instruction prompts sent to the completion service."""

    def __init__(self, max_content_chars: int = 8000):
        self.max_content_chars = max_content_chars

    def truncate(self, text: str, marker: str = "") -> str:
        """Cut text to the content budget, appending marker if anything was dropped."""
        if len(text) <= self.max_content_chars:
            return text
        return text[: self.max_content_chars] + marker

    def topic_prompt(self, topic: str) -> str:
        return f"""
Analyze the technology topic: "{topic}"

Please provide a comprehensive analysis in the following format:

{_format_sections(_TOPIC_INSTRUCTIONS)}

Please ensure each section is detailed, informative, and based on current industry knowledge. \
Write in a professional, analytical tone suitable for business intelligence reports.
"""

    def document_prompt(self, filename: str, text: str) -> str:
        content = self.truncate(text, TRUNCATION_MARKER)
        return f"""
Analyze the following document content and extract technology-related insights:

Document: {filename}
Content: {content}

Based on this document, provide a comprehensive technology analysis in the following format:

{_format_sections(_DOCUMENT_INSTRUCTIONS)}

Please ensure each section is detailed and based on the content provided. \
If certain information is not available in the document, indicate that clearly.
"""

    def url_prompt(self, url: str, text: str) -> str:
        content = self.truncate(text)
        return f"""
Analyze the following web page content and extract technology-related insights:

URL: {url}
Content: {content}

Based on this web page, provide a comprehensive technology analysis in the following format:

{_format_sections(_URL_INSTRUCTIONS)}

Please ensure each section is detailed and based on the content provided. \
Focus on technology-related information and insights.
"""

    def refine_prompt(self, action: str, content: str, context: str) -> str:
        """Wrap a section's text in the rewrite template for action.

        Raises:
            InvalidActionError: If action is not refine, simplify or expand.
        """
        template = _REFINE_TEMPLATES.get(action)
        if template is None:
            raise InvalidActionError("Invalid action")
        return template.format(context=context, content=content)
