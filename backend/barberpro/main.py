# barberpro/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from barberpro.config import get_settings
from barberpro.db import init_db
from barberpro.repositories import InvalidRecord
from barberpro.routers import admin, clients, public
from barberpro.storage import StorageFailure

settings = get_settings()
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger("api")


# ---------------------------------------------------------------------------
# Lifespan → creamos la tabla kv_records si no existe
# ---------------------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    yield


app = FastAPI(title="BarberPro API", lifespan=lifespan)

app.include_router(public.router)
app.include_router(clients.router)
app.include_router(admin.router)


@app.exception_handler(StorageFailure)
async def storage_failure_handler(request: Request, exc: StorageFailure):
    logger.error("StorageFailure en %s: %s", request.url.path, exc)
    return JSONResponse(status_code=503, content={"detail": "Armazenamento indisponível", "error": str(exc)})


@app.exception_handler(InvalidRecord)
async def invalid_record_handler(request: Request, exc: InvalidRecord):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.get("/health")
async def health():
    return {
        "status": "ok",
        "env": settings.ENV,
        "ai_enabled": bool(settings.OPENAI_API_KEY),
    }
