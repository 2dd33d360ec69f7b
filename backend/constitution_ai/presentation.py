from __future__ import annotations
from typing import List, Optional

from pydantic import BaseModel

from .controller import ControllerSnapshot, ControllerState
from .schemas import AnalysisResult, Citation, ConstitutionStatus, HistoryItem


SUGGESTED_QUERIES: List[str] = ["Right to Privacy", "Gender Equality", "Freedom of Press", "Reservation Laws"]
QUERY_PREVIEW_LENGTH = 120


class StatusTreatment(BaseModel):
	kind: str
	label: str
	tone: str


PROTECTED_TREATMENT = StatusTreatment(kind="protected", label="Constitutionally Protected", tone="emerald")
VIOLATION_TREATMENT = StatusTreatment(kind="violation", label="Violation / Prohibited", tone="rose")
DEPENDS_TREATMENT = StatusTreatment(kind="depends", label="Depends on Context / Restrictions Apply", tone="amber")


class ResultCard(BaseModel):
	status: str
	treatment: StatusTreatment
	query: Optional[str] = None
	articles: List[str]
	explanation: str
	citations: List[Citation]


class HistoryCard(BaseModel):
	id: str
	status: str
	treatment: StatusTreatment
	query_preview: str
	first_article: Optional[str]
	more_articles: int
	# Epoch milliseconds; the browser formats it in its own locale and timezone
	timestamp: int


class PageView(BaseModel):
	state: ControllerState
	query: str
	loading: bool
	result: Optional[ResultCard]
	error: Optional[str]
	history: List[HistoryCard]
	show_empty_state: bool
	suggestions: List[str]


def status_treatment(status: str) -> StatusTreatment:
	# Substring match: the model sometimes wraps the symbol in words
	status = status or ""
	if ConstitutionStatus.PROTECTED.value in status:
		return PROTECTED_TREATMENT
	if ConstitutionStatus.VIOLATION.value in status:
		return VIOLATION_TREATMENT
	return DEPENDS_TREATMENT


def split_articles(articles: str) -> List[str]:
	return [part.strip() for part in (articles or "").split(",") if part.strip()]


def truncate(text: str, limit: int = QUERY_PREVIEW_LENGTH) -> str:
	if len(text) <= limit:
		return text
	return text[: limit - 1].rstrip() + "…"


def result_card(result: AnalysisResult, query: Optional[str] = None) -> ResultCard:
	return ResultCard(
		status=result.status,
		treatment=status_treatment(result.status),
		query=query or None,
		articles=split_articles(result.articles),
		explanation=result.explanation,
		citations=list(result.citations),
	)


def history_card(item: HistoryItem) -> HistoryCard:
	articles = split_articles(item.articles)
	return HistoryCard(
		id=item.id,
		status=item.status,
		treatment=status_treatment(item.status),
		query_preview=truncate(item.query),
		first_article=articles[0] if articles else None,
		more_articles=max(len(articles) - 1, 0),
		timestamp=item.timestamp,
	)


def page_view(snapshot: ControllerSnapshot) -> PageView:
	loading = snapshot.state is ControllerState.SUBMITTING
	card = None
	if snapshot.result is not None and not loading:
		card = result_card(snapshot.result, snapshot.last_query)
	return PageView(
		state=snapshot.state,
		query=snapshot.query,
		loading=loading,
		result=card,
		error=snapshot.error,
		history=[history_card(item) for item in snapshot.history],
		show_empty_state=card is None and not loading and snapshot.error is None and not snapshot.history,
		suggestions=list(SUGGESTED_QUERIES),
	)
