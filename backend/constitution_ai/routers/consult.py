from __future__ import annotations
import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..controller import AppController
from ..deps import get_controller
from ..errors import HistoryItemNotFound
from ..presentation import PageView, page_view

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["consult"])


class ConsultRequest(BaseModel):
	query: str


class ConsultResponse(BaseModel):
	accepted: bool
	view: PageView


@router.get("/state", response_model=PageView)
def get_state(controller: AppController = Depends(get_controller)):
	return page_view(controller.snapshot())


@router.post("/consult", response_model=ConsultResponse)
async def consult(req: ConsultRequest, controller: AppController = Depends(get_controller)):
	accepted = await controller.submit(req.query)
	if not accepted:
		logger.info("Ignored submission (blank query or analysis already in flight)")
	return ConsultResponse(accepted=accepted, view=page_view(controller.snapshot()))


@router.post("/history/{item_id}/select", response_model=PageView)
def select_history(item_id: str, controller: AppController = Depends(get_controller)):
	try:
		controller.select_history(item_id)
	except HistoryItemNotFound:
		raise HTTPException(status_code=404, detail="history item not found")
	return page_view(controller.snapshot())


@router.delete("/history", response_model=PageView)
def clear_history(controller: AppController = Depends(get_controller)):
	controller.clear_history()
	return page_view(controller.snapshot())
