"""
Query service: maps a natural-language question to constitutional articles.

The heavy lifting is done by Gemini under a fixed system instruction and a
strict response schema. This module only builds the request, parses the
answer and turns every backend failure into one user-facing error.
"""

from __future__ import annotations
import json
import logging
from typing import Any, Dict, Optional

from ..errors import AnalysisUnavailableError
from ..gemini_client import GeminiClient
from ..schemas import AnalysisResult

logger = logging.getLogger(__name__)


SYSTEM_INSTRUCTION = (
	"You are an expert on the Indian Constitution. Your task is to take a user query "
	"and map it to the most relevant Article(s) of the Constitution.\n\n"
	"For each inquiry:\n"
	"1. Identify the relevant Articles.\n"
	"2. Provide a status: ✅ (Protected), ❌ (Violation), or ⚠️ (Depends on context).\n"
	"3. Provide a simple explanation in plain language.\n"
	"4. Provide the EXACT VERBATIM text or a highly accurate official summary for each "
	"cited Article as a \"citation\".\n\n"
	"Keep the explanation simple for a layperson."
)

RESPONSE_SCHEMA: Dict[str, Any] = {
	"type": "OBJECT",
	"properties": {
		"articles": {
			"type": "STRING",
			"description": "Comma-separated list of Articles, e.g., 'Article 14, Article 21'",
		},
		"status": {
			"type": "STRING",
			"description": "Exactly one of: ✅, ❌, ⚠️",
		},
		"explanation": {
			"type": "STRING",
			"description": "Short explanation in simple language",
		},
		"citations": {
			"type": "ARRAY",
			"items": {
				"type": "OBJECT",
				"properties": {
					"article": {"type": "STRING", "description": "The name of the article, e.g., Article 19(1)(a)"},
					"text": {"type": "STRING", "description": "The verbatim or official text of the article"},
				},
				"required": ["article", "text"],
			},
		},
	},
	"required": ["articles", "status", "explanation", "citations"],
}


def _parse_payload(text: str) -> Optional[Dict[str, Any]]:
	"""Strict parse of the model text: a JSON object, or None."""
	try:
		data = json.loads(text or "{}")
	except ValueError:
		logger.warning("Model returned non-JSON payload (%d chars); using defaults", len(text))
		return None
	if not isinstance(data, dict):
		logger.warning("Model returned JSON %s instead of an object; using defaults", type(data).__name__)
		return None
	return data


async def analyze_query(query: str, *, client: Optional[GeminiClient] = None) -> AnalysisResult:
	owns_client = client is None
	try:
		if client is None:
			client = GeminiClient()
		text = await client.generate_structured(
			query,
			system_instruction=SYSTEM_INSTRUCTION,
			response_schema=RESPONSE_SCHEMA,
		)
	except Exception as err:
		logger.exception("Gemini API error while analyzing query")
		raise AnalysisUnavailableError() from err
	finally:
		if owns_client and client is not None:
			await client.aclose()
	return AnalysisResult.from_payload(_parse_payload(text), raw=text or "")
