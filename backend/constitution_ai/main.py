from pathlib import Path
import logging

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from fastapi.responses import RedirectResponse

from .db import init_db
from .settings import settings
from .routers import health, consult, speech

logging.basicConfig(
	level=settings.log_level.upper(),
	format="%(asctime)s %(levelname)-8s %(name)s - %(message)s",
)
for _name in ("httpx", "httpcore"):
	logging.getLogger(_name).setLevel(logging.WARNING)

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parents[2]
FRONTEND_DIR = BASE_DIR / "frontend"

app = FastAPI(title="Constitution India AI")
app.include_router(health.router)
app.include_router(consult.router)
app.include_router(speech.router)

# Static single-page client at /app (absolute path so cwd doesn't matter when launching)
app.mount("/app", StaticFiles(directory=FRONTEND_DIR, html=True, check_dir=False), name="frontend")

@app.get("/", include_in_schema=False)
async def redirect_root_to_app():
	return RedirectResponse(url="/app")

@app.get("/info")
def root():
	return {"status": "ok", "gemini_configured": bool(settings.gemini_api_key)}

@app.on_event("startup")
async def startup_event():
	init_db()
	if not settings.gemini_api_key:
		logger.warning("GEMINI_API_KEY is not set; every analysis will fail")
