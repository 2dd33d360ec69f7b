"""
Result schema shared by the query service, the controller and the API.

The JSON field names (articles, status, explanation, raw, citations, id,
query, timestamp) are also the persisted history format, so changing a field
name here invalidates every stored history blob.
"""

from __future__ import annotations
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError


DEFAULT_ARTICLES = "Unknown"
DEFAULT_EXPLANATION = "No explanation provided."


class ConstitutionStatus(str, Enum):
	PROTECTED = "✅"
	VIOLATION = "❌"
	DEPENDS = "⚠️"


class Citation(BaseModel):
	model_config = ConfigDict(frozen=True)

	article: str
	text: str


class AnalysisResult(BaseModel):
	"""One answer from the Constitution expert.

	``status`` is kept as a plain string: the model is asked for one of the
	:class:`ConstitutionStatus` symbols but may return anything, and the
	presentation layer falls back to the "depends" treatment for unknown values.
	"""

	model_config = ConfigDict(frozen=True)

	articles: str
	status: str
	explanation: str
	raw: str = ""
	citations: List[Citation] = Field(default_factory=list)

	@classmethod
	def from_payload(cls, payload: Optional[Dict[str, Any]], raw: str) -> "AnalysisResult":
		"""Build a result from a parsed model payload, defaulting field by field.

		``payload`` is ``None`` when the model text was not a JSON object; every
		field then takes its default and only ``raw`` carries what was received.
		"""
		data = payload or {}
		return cls(
			articles=_non_empty_str(data.get("articles")) or DEFAULT_ARTICLES,
			status=_non_empty_str(data.get("status")) or ConstitutionStatus.DEPENDS.value,
			explanation=_non_empty_str(data.get("explanation")) or DEFAULT_EXPLANATION,
			raw=raw,
			citations=_coerce_citations(data.get("citations")),
		)


class HistoryItem(AnalysisResult):
	id: str
	query: str
	# Epoch milliseconds
	timestamp: int

	@classmethod
	def from_result(cls, result: AnalysisResult, *, id: str, query: str, timestamp: int) -> "HistoryItem":
		return cls(**result.model_dump(), id=id, query=query, timestamp=timestamp)

	def to_result(self) -> AnalysisResult:
		return AnalysisResult(**self.model_dump(include=set(AnalysisResult.model_fields)))


def _non_empty_str(value: Any) -> Optional[str]:
	if isinstance(value, str) and value:
		return value
	return None


def _coerce_citations(value: Any) -> List[Citation]:
	if not isinstance(value, list):
		return []
	citations: List[Citation] = []
	for entry in value:
		try:
			citations.append(Citation.model_validate(entry))
		except ValidationError:
			# Entries missing article/text are dropped, the rest are kept in order
			continue
	return citations
