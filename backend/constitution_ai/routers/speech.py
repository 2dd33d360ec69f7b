from __future__ import annotations
import logging

from fastapi import APIRouter, HTTPException
from fastapi.responses import Response
from pydantic import BaseModel, ConfigDict, Field

from ..audio import pcm16_to_wav
from ..services.speech import generate_speech

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["speech"])


class SpeechRequest(BaseModel):
	# Whitespace-only text is rejected like a blank query
	model_config = ConfigDict(str_strip_whitespace=True)

	text: str = Field(min_length=1)


@router.post("/speech", response_class=Response)
async def speech(req: SpeechRequest):
	try:
		audio_b64 = await generate_speech(req.text)
		wav = pcm16_to_wav(audio_b64)
	except Exception as e:
		logger.exception("Speech synthesis failed")
		raise HTTPException(status_code=502, detail=str(e))
	return Response(content=wav, media_type="audio/wav", headers={"Cache-Control": "no-store"})
