"""Tests for analyze_query: request contract, parsing fallbacks, error mapping."""

from __future__ import annotations

import json
import logging

import httpx
import pytest

from constitution_ai import gemini_client
from constitution_ai.errors import ANALYSIS_UNAVAILABLE_MESSAGE, AnalysisUnavailableError
from constitution_ai.schemas import Citation
from constitution_ai.services.query import RESPONSE_SCHEMA, SYSTEM_INSTRUCTION, _parse_payload, analyze_query


FREE_SPEECH_PAYLOAD = {
	"articles": "Article 19",
	"status": "✅",
	"explanation": "Every citizen has the right to freedom of speech and expression.",
	"citations": [{"article": "Article 19(1)(a)", "text": "All citizens shall have the right to freedom of speech and expression;"}],
}


class TestParsePayload:
	def test_object(self) -> None:
		assert _parse_payload('{"a": 1}') == {"a": 1}

	def test_empty_text_is_empty_object(self) -> None:
		assert _parse_payload("") == {}

	def test_invalid_json(self) -> None:
		assert _parse_payload("Article 21 protects you") is None

	def test_json_array(self) -> None:
		assert _parse_payload("[1, 2]") is None


class TestAnalyzeQuery:
	@pytest.mark.asyncio
	async def test_free_speech_example(self, make_client, text_envelope) -> None:
		client = make_client(body=text_envelope(FREE_SPEECH_PAYLOAD))

		result = await analyze_query("Do I have freedom of speech?", client=client)

		assert result.articles == "Article 19"
		assert result.status == "✅"
		assert result.citations == [Citation(**FREE_SPEECH_PAYLOAD["citations"][0])]
		assert json.loads(result.raw) == FREE_SPEECH_PAYLOAD

	@pytest.mark.asyncio
	async def test_sends_fixed_instruction_and_schema(self, make_client, text_envelope) -> None:
		client = make_client(body=text_envelope(FREE_SPEECH_PAYLOAD))

		await analyze_query("Is child labor legal?", client=client)

		body = json.loads(client.transport.requests[0].content)
		assert body["contents"][0]["parts"][0]["text"] == "Is child labor legal?"
		assert body["systemInstruction"]["parts"][0]["text"] == SYSTEM_INSTRUCTION
		assert body["generationConfig"]["responseSchema"] == RESPONSE_SCHEMA
		assert body["generationConfig"]["responseMimeType"] == "application/json"

	def test_schema_requires_all_fields(self) -> None:
		assert RESPONSE_SCHEMA["required"] == ["articles", "status", "explanation", "citations"]
		assert RESPONSE_SCHEMA["properties"]["citations"]["items"]["required"] == ["article", "text"]

	@pytest.mark.asyncio
	async def test_missing_citations_defaults_to_empty(self, make_client, text_envelope) -> None:
		payload = {k: v for k, v in FREE_SPEECH_PAYLOAD.items() if k != "citations"}
		client = make_client(body=text_envelope(payload))

		result = await analyze_query("q", client=client)

		assert result.citations == []
		assert result.articles == "Article 19"

	@pytest.mark.asyncio
	async def test_free_text_answer_is_defaulted(self, make_client, text_envelope) -> None:
		client = make_client(body=text_envelope("I think Article 21 applies."))

		result = await analyze_query("q", client=client)

		assert result.articles == "Unknown"
		assert result.status == "⚠️"
		assert result.explanation == "No explanation provided."
		assert result.raw == "I think Article 21 applies."

	@pytest.mark.asyncio
	async def test_http_error_maps_to_generic_error(self, make_client, caplog) -> None:
		client = make_client(body={"error": {"message": "quota"}}, status_code=429)

		with caplog.at_level(logging.ERROR, logger="constitution_ai.services.query"):
			with pytest.raises(AnalysisUnavailableError) as excinfo:
				await analyze_query("q", client=client)

		assert str(excinfo.value) == ANALYSIS_UNAVAILABLE_MESSAGE
		assert isinstance(excinfo.value.__cause__, httpx.HTTPStatusError)
		assert "Gemini API error" in caplog.text

	@pytest.mark.asyncio
	async def test_transport_error_maps_to_generic_error(self, make_client) -> None:
		def _boom(request: httpx.Request) -> httpx.Response:
			raise httpx.ConnectError("network down", request=request)

		client = make_client(_boom)
		with pytest.raises(AnalysisUnavailableError):
			await analyze_query("q", client=client)

	@pytest.mark.asyncio
	async def test_missing_api_key_maps_to_generic_error(self, monkeypatch) -> None:
		monkeypatch.setattr(gemini_client.settings, "gemini_api_key", None)
		with pytest.raises(AnalysisUnavailableError):
			await analyze_query("q")
