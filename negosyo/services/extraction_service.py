"""Transcription and structured content extraction via Groq's OpenAI-compatible API.

Features:
- Whisper transcription of a submission's interview audio/video
- Transcript -> ``BusinessContent`` JSON, retried once on malformed output
"""

import json
import logging
import re
from urllib.parse import urlparse

import httpx
from openai import APIError, APITimeoutError, AsyncOpenAI
from pydantic import ValidationError as PydanticValidationError

from negosyo.config import settings
from negosyo.core.exceptions import UpstreamError
from negosyo.schemas.content import BusinessContent

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are a business content analyst for small Filipino businesses.
You read interview transcripts and return structured website content as strict JSON.
Never invent contact details that were not mentioned."""

EXTRACTION_PROMPT = """Extract structured information from this business interview transcript.

Business: {business_name} ({business_type}) in {city}

TRANSCRIPT:
{transcript}

Return JSON in exactly this shape:
{{
  "tagline": "A short, catchy tagline for the business (max 10 words)",
  "about": "A compelling 2-3 sentence description of the business",
  "services": [{{"name": "Service name", "description": "One sentence"}}],
  "contact": {{"phone": "if mentioned", "email": "if mentioned", "address": "if mentioned"}},
  "highlights": ["Key highlight 1", "Key highlight 2", "Key highlight 3"]
}}

Rules:
- Leave a field empty if the transcript does not mention it
- Services should be clear and specific
- Highlights should emphasize unique selling points
- Return ONLY valid JSON, no additional text"""

RETRY_PROMPT = "Your previous answer was not valid JSON for the requested shape. Reply again with ONLY the JSON object."

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


class MalformedContentError(ValueError):
    """The model answered, but not with usable JSON."""


def parse_business_content(raw: str) -> BusinessContent:
    """Parse model output into ``BusinessContent``, tolerating Markdown fences."""
    cleaned = _FENCE_RE.sub("", (raw or "").strip()).strip()
    if not cleaned.startswith("{"):
        start, end = cleaned.find("{"), cleaned.rfind("}")
        if start == -1 or end <= start:
            raise MalformedContentError("no JSON object in response")
        cleaned = cleaned[start : end + 1]
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise MalformedContentError(f"invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise MalformedContentError("top-level JSON is not an object")
    try:
        return BusinessContent.model_validate(data)
    except PydanticValidationError as e:
        raise MalformedContentError(f"unexpected shape: {e.error_count()} errors") from e


class ExtractionService:
    """Groq client for transcripts and business content."""

    def __init__(self, client: AsyncOpenAI | None = None):
        if client is not None:
            self.client = client
        elif settings.groq_api_key:
            self.client = AsyncOpenAI(
                api_key=settings.groq_api_key,
                base_url=settings.groq_base_url,
                timeout=settings.llm_timeout_seconds,
                max_retries=1,
            )
        else:
            self.client = None
            logger.warning("Groq not configured, set GROQ_API_KEY")

    @property
    def configured(self) -> bool:
        return self.client is not None

    def _require_client(self, service: str) -> AsyncOpenAI:
        if self.client is None:
            raise UpstreamError(service, "Groq API key is not configured")
        return self.client

    async def _chat(self, messages: list[dict]) -> str:
        client = self._require_client("llm")
        try:
            response = await client.chat.completions.create(
                model=settings.groq_chat_model,
                messages=messages,
                temperature=0.7,
                max_tokens=1500,
            )
        except APITimeoutError as e:
            raise UpstreamError("llm", "request timed out", timeout=True) from e
        except APIError as e:
            raise UpstreamError("llm", str(e)) from e
        return response.choices[0].message.content or ""

    async def extract_content(
        self,
        transcript: str,
        *,
        business_name: str = "",
        business_type: str = "",
        city: str = "",
    ) -> BusinessContent:
        """Extract ``BusinessContent`` from a transcript.

        Malformed JSON gets exactly one corrective retry, then surfaces as
        ``UpstreamError``.
        """
        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {
                "role": "user",
                "content": EXTRACTION_PROMPT.format(
                    business_name=business_name or "Unknown",
                    business_type=business_type or "business",
                    city=city or "the Philippines",
                    transcript=transcript,
                ),
            },
        ]
        raw = await self._chat(messages)
        try:
            return parse_business_content(raw)
        except MalformedContentError as first_error:
            logger.warning("Extraction returned malformed JSON, retrying once: %s", first_error)
            messages += [
                {"role": "assistant", "content": raw},
                {"role": "user", "content": RETRY_PROMPT},
            ]
        raw = await self._chat(messages)
        try:
            return parse_business_content(raw)
        except MalformedContentError as e:
            raise UpstreamError("llm", f"malformed content after retry: {e}") from e

    async def transcribe(self, media_url: str) -> str:
        """Download interview media and return its plain-text transcript."""
        client = self._require_client("transcription")
        try:
            async with httpx.AsyncClient(timeout=settings.media_download_timeout_seconds) as http:
                resp = await http.get(media_url, follow_redirects=True)
                resp.raise_for_status()
        except httpx.TimeoutException as e:
            raise UpstreamError("storage", "media download timed out", timeout=True) from e
        except httpx.HTTPError as e:
            raise UpstreamError("storage", f"media download failed: {e}") from e

        filename = urlparse(media_url).path.rsplit("/", 1)[-1] or "interview.mp3"
        try:
            result = await client.audio.transcriptions.create(
                model=settings.groq_transcription_model,
                file=(filename, resp.content),
                response_format="json",
            )
        except APITimeoutError as e:
            raise UpstreamError("transcription", "request timed out", timeout=True) from e
        except APIError as e:
            raise UpstreamError("transcription", str(e)) from e
        text = (getattr(result, "text", "") or "").strip()
        if not text:
            raise UpstreamError("transcription", "empty transcript")
        return text


# Singleton service instance
_extraction_service: ExtractionService | None = None


def get_extraction_service() -> ExtractionService:
    global _extraction_service
    if _extraction_service is None:
        _extraction_service = ExtractionService()
    return _extraction_service
