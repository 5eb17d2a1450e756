"""Runtime configuration.

Everything is read from the environment once, at import time. Defaults are
suitable for local development.
"""

import os

# Model invocation. Retries are done by the OpenAI client (429/5xx/connection
# errors only); 400 and 401 are never retried.
LLM_TEMPERATURE = float(os.getenv("LLM_TEMPERATURE", "0"))
LLM_MAX_RETRIES = int(os.getenv("LLM_MAX_RETRIES", "3"))
LLM_TIMEOUT = float(os.getenv("LLM_TIMEOUT", "60"))

# Refine defaults, used when a caller asks for refine without parameters
REFINE_CHUNK_SIZE = int(os.getenv("REFINE_CHUNK_SIZE", "2000"))
REFINE_OVERLAP = int(os.getenv("REFINE_OVERLAP", "100"))

# PDF parser
PDF_MAX_BYTES = int(os.getenv("PDF_MAX_BYTES", str(5 * 1024 * 1024)))
PDF_FETCH_TIMEOUT = float(os.getenv("PDF_FETCH_TIMEOUT", "30"))

# Database (API keys / applications)
POSTGRES_HOST = os.getenv("POSTGRES_HOST", "localhost")
POSTGRES_PORT = os.getenv("POSTGRES_PORT", "5432")
POSTGRES_DB = os.getenv("POSTGRES_DB", "organizer")
POSTGRES_USER = os.getenv("POSTGRES_USER", "organizer")
POSTGRES_PASSWORD = os.getenv("POSTGRES_PASSWORD", "organizer-dev")

DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"postgresql+asyncpg://{POSTGRES_USER}:{POSTGRES_PASSWORD}"
    f"@{POSTGRES_HOST}:{POSTGRES_PORT}/{POSTGRES_DB}",
)

SERVICE_NAME = "organize-simple"
SERVICE_VERSION = "1.0.0"
