"""FastAPI application for Organize Simple.

Logging: Uses structured JSON logging.
Set LOG_FORMAT=pretty for development-friendly output.
"""

from contextlib import asynccontextmanager

# Configure structured logging BEFORE importing anything else
from src.utils.logging import configure_logging, get_logger, log  # noqa: E402

configure_logging()

MODULE = "api"
logger = get_logger()

from fastapi import FastAPI, Request  # noqa: E402
from fastapi.encoders import jsonable_encoder  # noqa: E402
from fastapi.exceptions import RequestValidationError  # noqa: E402
from fastapi.responses import JSONResponse  # noqa: E402

from src.api.routes.health import router as health_router  # noqa: E402
from src.api.routes.organized_data import router as organized_data_router  # noqa: E402
from src.api.routes.pdf import router as pdf_router  # noqa: E402
from src.config import SERVICE_VERSION  # noqa: E402
from src.db.session import engine  # noqa: E402
from src.db.models import Base  # noqa: E402


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup/shutdown."""
    # Create DB tables if they don't exist
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    log.info(logger, MODULE, "db_ready", "Database tables ready")

    yield

    # Cleanup
    await engine.dispose()
    log.info(logger, MODULE, "shutdown", "Application shutdown complete")


app = FastAPI(
    title="Organize Simple",
    description="Structured data from unstructured text, with LLMs",
    version=SERVICE_VERSION,
    lifespan=lifespan,
)

app.include_router(health_router)
app.include_router(
    organized_data_router, prefix="/v1/organized-data/json", tags=["organized-data"]
)
app.include_router(pdf_router, prefix="/v1/parsers/pdf", tags=["parsers"])


@app.exception_handler(RequestValidationError)
async def validation_error(request: Request, exc: RequestValidationError):
    """Malformed request bodies are a 400; 422 is kept for unusable model output."""
    log.warning(logger, MODULE, "invalid_request", "Request body failed validation",
                path=request.url.path, errors=len(exc.errors()))
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})
