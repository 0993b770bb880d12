import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from .db import Base, engine, ensure_schema
from .settings import settings
from .routers import health
from .routers import user
from .routers import progress
from .routers import badges
from .routers import quiz
from .routers import chat
from .routers import reasoning
from .routers import leaderboard

logging.basicConfig(
	level=getattr(logging, settings.log_level.upper(), logging.INFO),
	format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="StudyMate API")
app.add_middleware(
	CORSMiddleware,
	allow_origins=settings.cors_allow_origins,
	allow_credentials=True,
	allow_methods=["*"],
	allow_headers=["*"],
)
app.include_router(health.router)
app.include_router(user.router)
app.include_router(progress.router)
app.include_router(badges.router)
app.include_router(quiz.router)
app.include_router(chat.router)
app.include_router(reasoning.router)
app.include_router(leaderboard.router)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
	# The client reads {"error": ...} bodies
	return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=getattr(exc, "headers", None))


# Static SPA bundle at /app (only when a build is present)
FRONTEND_DIR = Path(settings.frontend_dir).resolve() if settings.frontend_dir else None
if FRONTEND_DIR is not None and FRONTEND_DIR.is_dir():
	app.mount("/app", StaticFiles(directory=FRONTEND_DIR, html=True), name="frontend")

	@app.get("/", include_in_schema=False)
	async def redirect_root_to_app():
		return RedirectResponse(url="/app")


@app.get("/info")
def root():
	return {"status": "ok", "gemini_configured": bool(settings.gemini_api_key)}


@app.on_event("startup")
async def startup_event():
	# Initialize DB schema
	Base.metadata.create_all(bind=engine)
	# Apply lightweight dev migrations
	try:
		ensure_schema()
	except Exception:
		logger.exception("Schema migration failed; continuing with existing tables")
	if not settings.gemini_api_key:
		logger.warning("GEMINI_API_KEY is not set; all generated content will be fallback content")
