import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import models  # noqa: F401
from .config import ALLOWED_ORIGINS
from .database import Base, engine
from .domain.addresses.router import router as addresses_router
from .domain.clients.router import router as clients_router
from .domain.scheduling.router import router as scheduling_router
from .domain.therapists.router import router as therapists_router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine, checkfirst=True)
    logger.info(f"Therapist scheduler ready (database: {engine.url.render_as_string(hide_password=True)})")
    yield
    engine.dispose()


app = FastAPI(title="Therapist Scheduler API", version="1.0.0", lifespan=lifespan)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report body validation failures in the same envelope as operation errors"""
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body") or "body"
    logger.warning(f"Validation error for {request.url.path}: {errors}")
    return JSONResponse(
        status_code=422,
        content={
            "detail": {
                "success": False,
                "error": f"Invalid parameter '{field}': {first.get('msg', 'invalid value')}",
                "errorType": "validation",
            }
        },
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in ALLOWED_ORIGINS.split(",") if origin.strip()],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(scheduling_router)
app.include_router(addresses_router)
app.include_router(therapists_router)
app.include_router(clients_router)


@app.get("/")
def root():
    return {"message": "Therapist Scheduler API is running"}


@app.get("/health")
def health():
    return {"status": "healthy"}
