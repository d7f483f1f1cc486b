"""Named failure reasons for a randomizer run.

Anything not covered here degrades gracefully and is reported as a warning.
"""

from __future__ import annotations


class RandomizerError(RuntimeError):
    error_code = "randomizer_error"

    def __init__(self, message: str, *, error_code: str | None = None) -> None:
        super().__init__(message)
        if error_code:
            self.error_code = error_code


class SeedRequiredError(RandomizerError):
    error_code = "seed_required"


class MissingTableError(RandomizerError):
    error_code = "missing_table"


class MissingTemplateError(RandomizerError):
    error_code = "missing_template"


class TableShapeError(RandomizerError):
    error_code = "table_shape"
