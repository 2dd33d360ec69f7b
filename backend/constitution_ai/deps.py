from __future__ import annotations
import re
import uuid
from functools import lru_cache

from fastapi import Depends, Request, Response

from .controller import AppController, ControllerRegistry
from .db import SessionLocal
from .services.query import analyze_query
from .settings import settings
from .store import KeyValueStore

CLIENT_COOKIE = "constitution_ai_client"
_CLIENT_ID_RE = re.compile(r"^[0-9a-f]{32}$")


@lru_cache(maxsize=1)
def get_registry() -> ControllerRegistry:
	return ControllerRegistry(
		analyze_query,
		lambda client_id: KeyValueStore(SessionLocal, client_id),
		max_clients=settings.max_cached_clients,
	)


def get_client_id(request: Request, response: Response) -> str:
	client_id = request.cookies.get(CLIENT_COOKIE, "")
	if not _CLIENT_ID_RE.match(client_id):
		client_id = uuid.uuid4().hex
		response.set_cookie(CLIENT_COOKIE, client_id, httponly=True, samesite="lax", max_age=365 * 24 * 60 * 60)
	return client_id


def get_controller(
	client_id: str = Depends(get_client_id),
	registry: ControllerRegistry = Depends(get_registry),
) -> AppController:
	return registry.get(client_id)
