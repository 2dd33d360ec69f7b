"""
Application state controller.

Owns what one browser sees: the query text, the in-flight flag, the current
result or error, and the recent-inquiry history. Every mutation goes through
one of the named operations below; the HTTP layer only reads snapshots.

States:
    idle            nothing submitted yet
    submitting      one analysis call in flight
    showing-result  a fresh or restored result is displayed
    showing-error   the last analysis failed
"""

from __future__ import annotations
import logging
import time
import uuid
from collections import OrderedDict
from enum import Enum
from typing import Awaitable, Callable, List, Optional

from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError

from .errors import AnalysisUnavailableError, HistoryItemNotFound
from .schemas import AnalysisResult, HistoryItem
from .store import KeyValueStore

logger = logging.getLogger(__name__)


HISTORY_KEY = "constitution_ai_history"
HISTORY_LIMIT = 10
MAX_CACHED_CLIENTS = 1000
UNKNOWN_ERROR_MESSAGE = "An unknown error occurred"

Analyzer = Callable[[str], Awaitable[AnalysisResult]]

_history_adapter = TypeAdapter(List[HistoryItem])


class ControllerState(str, Enum):
	IDLE = "idle"
	SUBMITTING = "submitting"
	SHOWING_RESULT = "showing-result"
	SHOWING_ERROR = "showing-error"


class ControllerSnapshot(BaseModel):
	model_config = ConfigDict(frozen=True)

	state: ControllerState
	query: str
	last_query: str
	result: Optional[AnalysisResult]
	error: Optional[str]
	history: List[HistoryItem]


def _now_ms() -> int:
	return int(time.time() * 1000)


class AppController:
	def __init__(self, analyze: Analyzer, store: KeyValueStore) -> None:
		self._analyze = analyze
		self._store = store
		self.state = ControllerState.IDLE
		self.query = ""
		self.last_query = ""
		self.result: Optional[AnalysisResult] = None
		self.error: Optional[str] = None
		self.history: List[HistoryItem] = []

	@property
	def is_submitting(self) -> bool:
		return self.state is ControllerState.SUBMITTING

	def load_history(self) -> None:
		"""Restore history from the store; unreadable data leaves it empty."""
		blob = self._store.get(HISTORY_KEY)
		if not blob:
			return
		try:
			items = _history_adapter.validate_json(blob)
		except ValidationError as exc:
			logger.warning("Failed to parse stored history for %s: %s", self._store.namespace, exc.error_count())
			return
		self.history = items[:HISTORY_LIMIT]

	def set_query(self, text: str) -> None:
		if self.is_submitting:
			return
		self.query = text

	async def submit(self, query: Optional[str] = None) -> bool:
		"""Run one analysis. Returns False when the request was ignored."""
		if self.is_submitting:
			return False
		if query is not None:
			self.query = query
		if not self.query.strip():
			return False

		submitted = self.query
		self.state = ControllerState.SUBMITTING
		self.error = None
		self.result = None
		self.last_query = submitted
		try:
			result = await self._analyze(submitted)
		except AnalysisUnavailableError as exc:
			self._fail(exc.message)
			return True
		except Exception:
			logger.exception("Unexpected failure while analyzing query")
			self._fail(UNKNOWN_ERROR_MESSAGE)
			return True
		except BaseException:
			# Cancelled mid-flight: nothing to show, but accept new submits
			self.state = ControllerState.IDLE
			raise

		self.result = result
		self.state = ControllerState.SHOWING_RESULT
		item = HistoryItem.from_result(
			result,
			id=uuid.uuid4().hex,
			query=submitted,
			timestamp=_now_ms(),
		)
		self._set_history([item, *self.history])
		self.query = ""
		return True

	def select_history(self, item_id: str) -> bool:
		if self.is_submitting:
			return False
		for item in self.history:
			if item.id == item_id:
				self.result = item.to_result()
				self.last_query = item.query
				self.error = None
				self.state = ControllerState.SHOWING_RESULT
				return True
		raise HistoryItemNotFound(item_id)

	def clear_history(self) -> None:
		self.history = []
		self._store.remove(HISTORY_KEY)

	def snapshot(self) -> ControllerSnapshot:
		return ControllerSnapshot(
			state=self.state,
			query=self.query,
			last_query=self.last_query,
			result=self.result,
			error=self.error,
			history=list(self.history),
		)

	def _fail(self, message: str) -> None:
		self.error = message
		self.state = ControllerState.SHOWING_ERROR

	def _set_history(self, items: List[HistoryItem]) -> None:
		self.history = items[:HISTORY_LIMIT]
		self._store.set(HISTORY_KEY, _history_adapter.dump_json(self.history).decode("utf-8"))


class ControllerRegistry:
	"""Lazily loaded controllers, one per client id, least recently used first out.

	History lives in the store, so an evicted client is simply reloaded on its
	next request. Controllers with an analysis in flight are never evicted.
	"""

	def __init__(
		self,
		analyze: Analyzer,
		store_factory: Callable[[str], KeyValueStore],
		*,
		max_clients: int = MAX_CACHED_CLIENTS,
	) -> None:
		self._analyze = analyze
		self._store_factory = store_factory
		self._max_clients = max_clients
		self._controllers: "OrderedDict[str, AppController]" = OrderedDict()

	@property
	def cached_count(self) -> int:
		return len(self._controllers)

	def get(self, client_id: str) -> AppController:
		controller = self._controllers.get(client_id)
		if controller is not None:
			self._controllers.move_to_end(client_id)
			return controller
		controller = AppController(self._analyze, self._store_factory(client_id))
		controller.load_history()
		self._controllers[client_id] = controller
		self._evict()
		return controller

	def _evict(self) -> None:
		excess = len(self._controllers) - self._max_clients
		if excess <= 0:
			return
		# The newest entry is the one just requested
		for client_id in list(self._controllers)[:-1]:
			if excess <= 0:
				break
			if self._controllers[client_id].is_submitting:
				continue
			del self._controllers[client_id]
			excess -= 1
