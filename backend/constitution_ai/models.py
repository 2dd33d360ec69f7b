from __future__ import annotations
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Text
from .db import Base


class KeyValueEntry(Base):
	__tablename__ = "kv_entries"
	# One namespace per browser client, mirroring its local storage
	namespace = Column(String(64), primary_key=True)
	key = Column(String(128), primary_key=True)
	value = Column(Text, nullable=False)
	updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
