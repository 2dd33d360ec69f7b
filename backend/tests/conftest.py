"""Shared test fixtures."""

import os

# Settings and the engine are created at import time; point them at an
# in-memory database and a fake key before any app module is imported.
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ.setdefault("GEMINI_API_KEY", "test-key")

import json
from typing import Any, Callable, Dict, List

import httpx
import pytest

from constitution_ai.db import SessionLocal, init_db
from constitution_ai.gemini_client import GeminiClient
from constitution_ai.models import KeyValueEntry
from constitution_ai.schemas import AnalysisResult, Citation
from constitution_ai.store import KeyValueStore


@pytest.fixture(autouse=True)
def _fresh_database():
	init_db()
	with SessionLocal() as db:
		db.query(KeyValueEntry).delete()
		db.commit()
	yield


@pytest.fixture
def store() -> KeyValueStore:
	return KeyValueStore(SessionLocal, "a" * 32)


@pytest.fixture
def article_19_result() -> AnalysisResult:
	return AnalysisResult(
		articles="Article 19",
		status="✅",
		explanation="You may speak freely, subject to reasonable restrictions.",
		raw="{}",
		citations=[Citation(article="Article 19(1)(a)", text="All citizens shall have the right to freedom of speech and expression.")],
	)


def _text_envelope(payload: Any) -> Dict[str, Any]:
	"""A generateContent envelope whose single text part is ``payload``."""
	text = payload if isinstance(payload, str) else json.dumps(payload)
	return {"candidates": [{"content": {"role": "model", "parts": [{"text": text}]}}]}


class RecordingTransport(httpx.MockTransport):
	"""MockTransport that keeps every request it served."""

	def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
		self.requests: List[httpx.Request] = []

		def _record(request: httpx.Request) -> httpx.Response:
			self.requests.append(request)
			return handler(request)

		super().__init__(_record)


@pytest.fixture
def make_client() -> Callable[..., GeminiClient]:
	"""Build a GeminiClient answering from ``handler`` or a fixed JSON body."""

	def _make(handler=None, *, body=None, status_code: int = 200, model=None):
		if handler is None:
			def handler(request: httpx.Request) -> httpx.Response:
				return httpx.Response(status_code, json=body if body is not None else {})
		transport = RecordingTransport(handler)
		client = GeminiClient(api_key="test-key", model=model, transport=transport)
		client.transport = transport
		return client

	return _make


@pytest.fixture
def text_envelope() -> Callable[[Any], Dict[str, Any]]:
	return _text_envelope
