"""FastAPI entrypoint for the skill tree shuffler."""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .routers.randomizer import get_context, router as randomizer_router

from packages.treeshuffle_core.errors import RandomizerError

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger("treeshuffle_api")

app = FastAPI(title="Skill Tree Shuffler API", version="0.1.0")

_cors_origins = [o.strip() for o in os.environ.get("TREESHUFFLE_CORS_ORIGINS", "*").split(",")]
_cors_allow_credentials = "*" not in _cors_origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=_cors_allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(randomizer_router)


@app.exception_handler(RandomizerError)
async def _randomizer_error_handler(request: Request, exc: RandomizerError):
    logger.warning("[RANDOMIZER] %s failed: %s (%s)", request.url.path, exc, exc.error_code)
    return JSONResponse(
        status_code=422,
        content={"detail": str(exc), "error_code": exc.error_code},
    )


@app.on_event("startup")
def startup() -> None:
    logger.info("[STARTUP] Skill tree shuffler API starting up at %s", datetime.utcnow().isoformat())
    data_dir = get_context().data_dir
    if not data_dir.exists():
        logger.warning("[STARTUP] Data directory %s does not exist; runs will fail until it is populated", data_dir)


@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"status": "ok"}
