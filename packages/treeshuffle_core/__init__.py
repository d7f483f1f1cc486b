"""Seeded skill-tree and act randomizer core."""

from .cache import ResultCache
from .data_loader import DataContext
from .errors import RandomizerError, SeedRequiredError
from .models import RandomizerOptions, RandomizerResult
from .packaging import build_mod_zip
from .pipeline import build_preview, download_id, normalize_options, run_randomizer

__all__ = [
    "ResultCache",
    "DataContext",
    "RandomizerError",
    "SeedRequiredError",
    "RandomizerOptions",
    "RandomizerResult",
    "build_mod_zip",
    "build_preview",
    "download_id",
    "normalize_options",
    "run_randomizer",
]
