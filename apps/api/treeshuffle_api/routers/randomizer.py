"""Randomizer preview, generation and download endpoints."""

from __future__ import annotations

import logging
import os
import threading
from typing import Any, Optional, Union

from fastapi import APIRouter, HTTPException
from fastapi.responses import Response
from pydantic import BaseModel, Field

from packages.treeshuffle_core.cache import DEFAULT_CAPACITY, ResultCache
from packages.treeshuffle_core.classes import ACTS, MAX_PLAYERS
from packages.treeshuffle_core.data_loader import DataContext
from packages.treeshuffle_core.errors import SeedRequiredError
from packages.treeshuffle_core.models import RandomizerOptions
from packages.treeshuffle_core.packaging import archive_filename, build_mod_zip
from packages.treeshuffle_core import pipeline

logger = logging.getLogger("treeshuffle_api.randomizer")

router = APIRouter(prefix="/api/v1/randomizer", tags=["randomizer"])

_STATE_LOCK = threading.Lock()
_context: Optional[DataContext] = None
_results: Optional[ResultCache] = None


def _int_env(name: str, default: int) -> int:
    raw = str(os.environ.get(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("[RANDOMIZER] Ignoring non-integer %s=%r", name, raw)
        return default


def get_context() -> DataContext:
    global _context
    with _STATE_LOCK:
        if _context is None:
            _context = DataContext()
            logger.info("[RANDOMIZER] Using data directory %s", _context.data_dir)
        return _context


def get_result_cache() -> ResultCache:
    global _results
    with _STATE_LOCK:
        if _results is None:
            _results = ResultCache(capacity=_int_env("TREESHUFFLE_RESULT_CACHE_SIZE", DEFAULT_CAPACITY))
        return _results


def reset_randomizer_state_for_tests() -> None:
    """Drop the cached data context and finished results."""
    global _context, _results
    with _STATE_LOCK:
        _context = None
        _results = None


class RandomizeRequest(BaseModel):
    seed: Optional[Union[int, str]] = Field(default=None, description="Integer seed or any text")
    enable_prereqs: bool = True
    fidelity: str = Field(default="minimal", description="minimal | normal")
    players_enabled: bool = False
    players_count: int = Field(default=1, ge=1, le=MAX_PLAYERS)
    players_acts: list[int] = Field(default_factory=lambda: list(ACTS))
    act_shuffle: bool = False
    starting_staff: bool = False
    staff_level: int = Field(default=1, ge=1, le=99)

    def to_options(self) -> RandomizerOptions:
        return RandomizerOptions(
            seed=self.seed,
            enable_prereqs=self.enable_prereqs,
            fidelity=self.fidelity,
            players_count=self.players_count if self.players_enabled else 1,
            players_acts=tuple(self.players_acts),
            act_shuffle=self.act_shuffle,
            starting_staff=self.starting_staff,
            staff_level=self.staff_level,
        )


def _normalized(req: RandomizeRequest) -> RandomizerOptions:
    try:
        return pipeline.normalize_options(req.to_options())
    except SeedRequiredError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/preview")
def preview(req: RandomizeRequest) -> dict[str, Any]:
    options = _normalized(req)
    return pipeline.build_preview(options, get_context())


@router.post("/randomize")
def randomize(req: RandomizeRequest) -> dict[str, Any]:
    options = _normalized(req)
    key = pipeline.download_id(options)
    cache = get_result_cache()

    cached = cache.get(key)
    if cached is not None:
        logger.info("[RANDOMIZER] Cache hit for seed %d (%s)", options.seed, key)
        return {**cached["summary"], "cached": True}

    result = pipeline.run_randomizer(options, get_context())
    archive = build_mod_zip(result)
    summary = {
        "seed": result.seed,
        "status": "ready",
        "download_id": key,
        "act_order": list(result.act_order) if result.act_order else None,
        "warnings": result.warnings,
        "filename": archive_filename(result),
    }
    cache.put(key, {"summary": summary, "archive": archive})
    return {**summary, "cached": False}


@router.get("/download/{download_id}")
def download(download_id: str) -> Response:
    cached = get_result_cache().get(download_id)
    if cached is None:
        raise HTTPException(status_code=404, detail="Mod not found. Please generate it first.")
    archive: bytes = cached["archive"]
    return Response(
        content=archive,
        media_type="application/zip",
        headers={"Content-Disposition": f'attachment; filename="{cached["summary"]["filename"]}"'},
    )
