from __future__ import annotations
import logging
from typing import Optional

from ..errors import NoAudioDataError
from ..gemini_client import GeminiClient
from ..settings import settings

logger = logging.getLogger(__name__)


SPEECH_INSTRUCTION = "Read this explanation clearly: {text}"


async def generate_speech(text: str, *, client: Optional[GeminiClient] = None) -> str:
	"""Synthesize ``text`` and return base64 raw PCM16 (mono, 24 kHz).

	Backend errors propagate unchanged. Nothing is cached, so each call
	re-synthesizes.
	"""
	owns_client = client is None
	if client is None:
		client = GeminiClient(model=settings.gemini_tts_model)
	try:
		audio = await client.generate_audio(SPEECH_INSTRUCTION.format(text=text))
	finally:
		if owns_client:
			await client.aclose()
	if not audio:
		raise NoAudioDataError()
	logger.debug("Received %d base64 chars of speech audio", len(audio))
	return audio
