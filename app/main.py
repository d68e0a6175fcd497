import importlib
import logging
from pathlib import Path
from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.configs.config import get_settings
from app.exceptions import InvalidStateError
from app.middleware.session_middleware import UploadSessionMiddleware
from app.services.auth_service import get_session_service

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler()],
)
logger = logging.getLogger(__name__)

settings = get_settings()

app = FastAPI(title="TikTop Size")

app.add_middleware(UploadSessionMiddleware)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],  # Allow all HTTP methods
    allow_headers=["*"],  # Allow all headers
)

hide_router = ["__init__.py"]

# For automatic route registration
ROUTES_DIR = Path(__file__).resolve().parent / "routes"
route_files = sorted(file.name for file in ROUTES_DIR.glob("*.py"))
for file in route_files:
    if file in hide_router:
        continue
    module_name = f"app.routes.{file[:-3]}"
    module = importlib.import_module(module_name)

    if hasattr(module, "router") and isinstance(module.router, APIRouter):
        app.include_router(module.router)


@app.exception_handler(InvalidStateError)
async def invalid_state_handler(request: Request, exc: InvalidStateError):
    return JSONResponse(
        status_code=409, content={"detail": exc.message, "status": exc.status}
    )


def log_session_change(event, user):
    user_id = user.get("id") if user else None
    logger.info(f"Auth session change: {event} (user={user_id})")


get_session_service().subscribe(log_session_change)


@app.get("/")
async def root():
    return {"message": "Healthcheck Passed"}
