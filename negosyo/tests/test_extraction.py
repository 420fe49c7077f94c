"""Content extraction: lenient parsing and the single corrective retry."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from negosyo.core.exceptions import UpstreamError
from negosyo.services.extraction_service import (
    ExtractionService,
    MalformedContentError,
    parse_business_content,
)


def _reply(content: str):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def _client(*replies: str) -> MagicMock:
    client = MagicMock()
    client.chat.completions.create = AsyncMock(side_effect=[_reply(r) for r in replies])
    return client


GOOD = '{"tagline": "Sariwang tinapay", "services": ["Pandesal", {"title": "Ensaymada"}], "highlights": ["Since 1970"]}'


class TestParse:
    def test_plain_json(self):
        content = parse_business_content(GOOD)
        assert content.tagline == "Sariwang tinapay"
        assert [s.name for s in content.services] == ["Pandesal", "Ensaymada"]

    def test_markdown_fence_is_stripped(self):
        content = parse_business_content(f"```json\n{GOOD}\n```")
        assert content.highlights == ["Since 1970"]

    def test_json_embedded_in_prose(self):
        content = parse_business_content(f"Here you go: {GOOD} Hope this helps!")
        assert content.tagline == "Sariwang tinapay"

    def test_non_dict_contact_is_ignored(self):
        content = parse_business_content('{"contact": "call us", "highlights": "not a list"}')
        assert content.contact.phone is None
        assert content.highlights == []

    @pytest.mark.parametrize("raw", ["", "no json here", "{broken", "[1, 2, 3]"])
    def test_malformed(self, raw):
        with pytest.raises(MalformedContentError):
            parse_business_content(raw)


class TestExtractContent:
    async def test_first_answer_used(self):
        client = _client(GOOD)
        content = await ExtractionService(client=client).extract_content("transcript", business_name="Panaderia")
        assert content.tagline == "Sariwang tinapay"
        assert client.chat.completions.create.await_count == 1
        prompt = client.chat.completions.create.await_args.kwargs["messages"][1]["content"]
        assert "Panaderia" in prompt

    async def test_malformed_answer_retried_once(self):
        client = _client("Sorry, I cannot do that.", GOOD)
        content = await ExtractionService(client=client).extract_content("transcript")
        assert content.tagline == "Sariwang tinapay"
        assert client.chat.completions.create.await_count == 2
        retry_messages = client.chat.completions.create.await_args.kwargs["messages"]
        assert retry_messages[-2] == {"role": "assistant", "content": "Sorry, I cannot do that."}

    async def test_second_malformed_answer_is_upstream_error(self):
        client = _client("nope", "still nope")
        with pytest.raises(UpstreamError) as exc_info:
            await ExtractionService(client=client).extract_content("transcript")
        assert exc_info.value.service == "llm"
        assert client.chat.completions.create.await_count == 2

    async def test_unconfigured_service(self, monkeypatch):
        from negosyo.config import settings

        monkeypatch.setattr(settings, "groq_api_key", "")
        service = ExtractionService()
        assert service.configured is False
        with pytest.raises(UpstreamError):
            await service.extract_content("transcript")
