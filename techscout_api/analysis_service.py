"""Analysis use cases: topic, document and URL reports, and section rewrites."""

import structlog

from techscout_api.config import Settings, get_settings
from techscout_api.content_fetcher import ContentFetcher, normalize_url
from techscout_api.document_reader import DocumentReader
from techscout_api.errors import ValidationError
from techscout_api.groq_client import GroqClient
from techscout_api.models import AnalysisRecord
from techscout_api.observability import log_llm_request, log_llm_response, record_extraction
from techscout_api.prompts import PromptBuilder, topic_from_filename, topic_from_url
from techscout_api.section_extractor import SectionExtractor

logger = structlog.get_logger()


class AnalysisService:
    """Service layer: validates input, builds the prompt, calls the model, parses the reply.

    Each analysis kind is a thin adapter around one shared
    completion-then-extraction step.
    """

    def __init__(
        self,
        groq_client: GroqClient,
        fetcher: ContentFetcher | None = None,
        document_reader: DocumentReader | None = None,
        prompt_builder: PromptBuilder | None = None,
        extractor: SectionExtractor | None = None,
        settings: Settings | None = None,
    ):
        self.settings = settings or get_settings()
        self.groq_client = groq_client
        self.fetcher = fetcher or ContentFetcher()
        self.document_reader = document_reader or DocumentReader(self.settings.max_upload_bytes)
        self.prompt_builder = prompt_builder or PromptBuilder(self.settings.max_content_chars)
        self.extractor = extractor or SectionExtractor()

    async def analyze_topic(self, topic: str | None) -> AnalysisRecord:
        topic = (topic or "").strip()
        if not topic:
            raise ValidationError("Topic is required")

        logger.info("Topic analysis requested", topic=topic)
        prompt = self.prompt_builder.topic_prompt(topic)
        return await self._analyze(topic, prompt, source="topic")

    async def analyze_document(self, filename: str | None, data: bytes) -> AnalysisRecord:
        text = self.document_reader.read(filename, data)
        topic = topic_from_filename(filename)

        logger.info("Document analysis requested", filename=filename, chars=len(text))
        prompt = self.prompt_builder.document_prompt(filename, text)
        return await self._analyze(topic, prompt, source="document")

    async def analyze_url(self, url: str | None) -> AnalysisRecord:
        url = normalize_url(url or "")
        if not url:
            raise ValidationError("URL is required")

        text = await self.fetcher.fetch_text(url)
        topic = topic_from_url(url)

        logger.info("URL analysis requested", url=url, chars=len(text))
        prompt = self.prompt_builder.url_prompt(url, text)
        return await self._analyze(topic, prompt, source="url")

    async def refine_content(self, content: str | None, action: str | None, context: str) -> str:
        """Rewrite one section's text with the refine, simplify or expand template.

        Returns the trimmed model reply, or the trimmed original content when
        the reply is empty.

        Raises:
            ValidationError: If content or action is missing.
            InvalidActionError: If action is not recognized.
            GroqError: If the completion call fails.
        """
        if not content or not action:
            raise ValidationError("Content and action are required")

        prompt = self.prompt_builder.refine_prompt(action, content, context)
        response = await self._complete(
            prompt,
            purpose="refine",
            temperature=self.settings.refine_temperature,
            max_tokens=self.settings.refine_max_tokens,
        )
        return response.strip() or content.strip()

    async def _analyze(self, topic: str, prompt: str, source: str) -> AnalysisRecord:
        reply = await self._complete(
            prompt,
            purpose=source,
            temperature=self.settings.analysis_temperature,
            max_tokens=self.settings.analysis_max_tokens,
        )
        sections = self.extractor.extract(reply)
        record_extraction(source, sections.strategy)
        return AnalysisRecord(topic=topic, **sections.as_fields())

    async def _complete(self, prompt: str, purpose: str, temperature: float, max_tokens: int) -> str:
        request_log = log_llm_request(model=self.groq_client.model, purpose=purpose, prompt=prompt)
        try:
            response = await self.groq_client.complete(
                prompt,
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except Exception as e:
            # Always close the request log so the active gauge drops.
            log_llm_response(request_log=request_log, error=str(e) or type(e).__name__)
            raise

        log_llm_response(
            request_log=request_log,
            tokens_total=response.tokens_used,
            finish_reason=response.finish_reason or "stop",
        )
        return response.content
