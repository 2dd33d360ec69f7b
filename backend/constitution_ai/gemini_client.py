from __future__ import annotations
import httpx
from typing import Any, Dict, List, Optional
from .settings import settings

class GeminiClient:
	def __init__(
		self,
		api_key: Optional[str] = None,
		*,
		base_url: Optional[str] = None,
		model: Optional[str] = None,
		transport: Optional[httpx.AsyncBaseTransport] = None,
	) -> None:
		self.api_key = api_key or settings.gemini_api_key
		if not self.api_key:
			raise ValueError("GEMINI_API_KEY is not configured")
		self.model = model or settings.gemini_model
		self.provider = settings.gemini_provider
		if self.provider == "vertex":
			region = settings.vertex_region
			project = settings.vertex_project or "placeholder-project"
			# Vertex AI Generative REST endpoint (API key via header)
			self.base_url = base_url or (
				f"https://{region}-aiplatform.googleapis.com/v1/projects/{project}/locations/{region}/publishers/google/models/{self.model}:generateContent"
			)
			self._auth_in_query = False
		else:
			# Google AI Studio (Generative Language API)
			self.base_url = base_url or f"https://generativelanguage.googleapis.com/v1beta/models/{self.model}:generateContent"
			self._auth_in_query = True
		self._client = httpx.AsyncClient(timeout=settings.gemini_timeout_seconds, transport=transport)

	async def generate_structured(
		self,
		contents: str,
		*,
		system_instruction: str,
		response_schema: Dict[str, Any],
		temperature: Optional[float] = None,
	) -> str:
		"""Ask for a JSON answer constrained to ``response_schema``; returns the raw text part."""
		payload: Dict[str, Any] = {
			"contents": [{"role": "user", "parts": [{"text": contents}]}],
			"systemInstruction": {"parts": [{"text": system_instruction}]},
			"generationConfig": {
				"temperature": settings.gemini_temperature if temperature is None else temperature,
				"responseMimeType": "application/json",
				"responseSchema": response_schema,
			},
		}
		data = await self._post_payload(payload)
		parts = _first_candidate_parts(data)
		return "".join(part.get("text", "") for part in parts if isinstance(part, dict))

	async def generate_audio(self, text: str, *, voice: Optional[str] = None) -> Optional[str]:
		"""Synthesize speech; returns the first inline base64 audio part, or None."""
		payload: Dict[str, Any] = {
			"contents": [{"parts": [{"text": text}]}],
			"generationConfig": {
				"responseModalities": ["AUDIO"],
				"speechConfig": {
					"voiceConfig": {"prebuiltVoiceConfig": {"voiceName": voice or settings.gemini_tts_voice}},
				},
			},
		}
		data = await self._post_payload(payload)
		for part in _first_candidate_parts(data):
			inline = part.get("inlineData") if isinstance(part, dict) else None
			if inline and inline.get("data"):
				return inline["data"]
		return None

	async def _post_payload(self, payload: Dict[str, Any]) -> Dict[str, Any]:
		params: Dict[str, Any] = {}
		headers: Dict[str, str] = {}
		if self._auth_in_query:
			params["key"] = self.api_key
		else:
			headers["x-goog-api-key"] = self.api_key
		r = await self._client.post(self.base_url, params=params, headers=headers, json=payload)
		r.raise_for_status()
		try:
			data = r.json()
		except ValueError as err:
			raise RuntimeError(f"Unexpected Gemini response: {r.text}") from err
		if not isinstance(data, dict):
			raise RuntimeError(f"Unexpected Gemini response: {r.text}")
		return data

	async def aclose(self) -> None:
		await self._client.aclose()


def _first_candidate_parts(data: Dict[str, Any]) -> List[Dict[str, Any]]:
	candidates = data.get("candidates") or []
	if not candidates:
		return []
	content = candidates[0].get("content") or {}
	return content.get("parts") or []
