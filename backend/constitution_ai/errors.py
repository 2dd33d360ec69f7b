from __future__ import annotations


ANALYSIS_UNAVAILABLE_MESSAGE = (
	"Failed to consult the Constitution expert. Please check your connection and try again."
)


class ConstitutionAIError(Exception):
	"""Base class for errors raised by the service."""


class AnalysisUnavailableError(ConstitutionAIError):
	"""The model backend could not produce an analysis.

	Always carries the same user-facing message; the cause is logged where the
	failure happened and chained as ``__cause__``.
	"""

	def __init__(self, message: str = ANALYSIS_UNAVAILABLE_MESSAGE) -> None:
		super().__init__(message)
		self.message = message


class NoAudioDataError(ConstitutionAIError):
	def __init__(self, message: str = "No audio data received") -> None:
		super().__init__(message)


class HistoryItemNotFound(ConstitutionAIError, KeyError):
	def __init__(self, item_id: str) -> None:
		super().__init__(item_id)
		self.item_id = item_id

	def __str__(self) -> str:
		return f"history item not found: {self.item_id}"
