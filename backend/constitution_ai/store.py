from __future__ import annotations
from typing import Callable, Optional

from sqlalchemy import delete
from sqlalchemy.orm import Session

from .models import KeyValueEntry


class KeyValueStore:
	"""String key-value store scoped to one client namespace.

	Each call opens and commits its own short session, so writes are durable
	as soon as the method returns.
	"""

	def __init__(self, session_factory: Callable[[], Session], namespace: str) -> None:
		self._session_factory = session_factory
		self.namespace = namespace

	def get(self, key: str) -> Optional[str]:
		with self._session_factory() as db:
			row = db.get(KeyValueEntry, (self.namespace, key))
			return row.value if row is not None else None

	def set(self, key: str, value: str) -> None:
		with self._session_factory() as db:
			db.merge(KeyValueEntry(namespace=self.namespace, key=key, value=value))
			db.commit()

	def remove(self, key: str) -> None:
		with self._session_factory() as db:
			db.execute(
				delete(KeyValueEntry).where(
					KeyValueEntry.namespace == self.namespace,
					KeyValueEntry.key == key,
				)
			)
			db.commit()
