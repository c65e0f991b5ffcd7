"""Per-run local staging directories."""

from __future__ import annotations

import shutil
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from .exceptions import StagingError
from .logging import get_logger

_log = get_logger(__name__)


def _safe_segments(value: str) -> list[str]:
    segments = [part for part in value.split("/") if part not in ("", ".")]
    if not segments:
        raise StagingError("Object location must not be empty")
    if ".." in segments:
        raise StagingError(f"Object location {value!r} escapes the staging area")
    return segments


@dataclass(frozen=True, slots=True)
class RunStaging:
    """Staging directory owned by a single pipeline run."""

    run_id: str
    root: Path

    def path_for(self, bucket: str, key: str) -> Path:
        """Return the local path mirroring ``{bucket}/{key}`` under the run root."""
        return self.root.joinpath(*_safe_segments(bucket), *_safe_segments(key))


@contextmanager
def staging_run(staging_root: Path, run_id: str | None = None) -> Iterator[RunStaging]:
    """Create a unique staging directory for one run and always remove it.

    Cleanup failures are logged and otherwise ignored so that they never mask
    the outcome of the run.
    """

    run_id = run_id or uuid.uuid4().hex
    root = staging_root / run_id
    try:
        root.mkdir(parents=True, exist_ok=False)
    except OSError as exc:
        raise StagingError(f"Unable to create staging directory {root}") from exc

    try:
        yield RunStaging(run_id=run_id, root=root)
    finally:
        try:
            shutil.rmtree(root)
        except OSError as exc:
            _log.warning("staging-cleanup-failed", run_id=run_id, error=str(exc))
