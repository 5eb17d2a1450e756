"""Health check endpoint."""

from fastapi import APIRouter

from src.config import SERVICE_NAME, SERVICE_VERSION

router = APIRouter()


@router.get("/health")
async def health():
    return {"status": "ok", "service": SERVICE_NAME, "version": SERVICE_VERSION}


@router.get("/")
async def root():
    return {"service": SERVICE_NAME, "version": SERVICE_VERSION}
