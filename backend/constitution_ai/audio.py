from __future__ import annotations
import base64
import io
import sys
import wave
from array import array
from typing import List, Sequence

SAMPLE_RATE = 24000
CHANNELS = 1
SAMPLE_WIDTH = 2  # 16-bit PCM


def decode_pcm16(data_b64: str) -> List[float]:
	"""Decode base64 little-endian PCM16 into floats in [-1.0, 1.0)."""
	raw = base64.b64decode(data_b64)
	if len(raw) % SAMPLE_WIDTH:
		# Trailing odd byte cannot form a sample
		raw = raw[:-1]
	samples = array("h")
	samples.frombytes(raw)
	if sys.byteorder != "little":
		samples.byteswap()
	return [s / 32768.0 for s in samples]


def encode_wav(samples: Sequence[float], *, sample_rate: int = SAMPLE_RATE) -> bytes:
	"""Pack normalized float samples into a mono 16-bit WAV buffer."""
	pcm = array("h", (_to_int16(s) for s in samples))
	if sys.byteorder != "little":
		pcm.byteswap()
	buf = io.BytesIO()
	with wave.open(buf, "wb") as wav:
		wav.setnchannels(CHANNELS)
		wav.setsampwidth(SAMPLE_WIDTH)
		wav.setframerate(sample_rate)
		wav.writeframes(pcm.tobytes())
	return buf.getvalue()


def pcm16_to_wav(data_b64: str) -> bytes:
	return encode_wav(decode_pcm16(data_b64))


def _to_int16(sample: float) -> int:
	value = int(round(sample * 32768.0))
	return max(-32768, min(32767, value))
