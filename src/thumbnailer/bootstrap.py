from __future__ import annotations

import threading
from dataclasses import dataclass

from .config import RuntimeOverrides, ThumbnailerSettings
from .logging import configure_logging, get_logger
from .pipeline import ThumbnailPipeline
from .storage import MinioStorage, StorageClient


@dataclass(slots=True)
class RuntimeState:
    settings: ThumbnailerSettings
    storage: StorageClient

    def pipeline(self) -> ThumbnailPipeline:
        return ThumbnailPipeline(self.storage, self.settings)


_state: RuntimeState | None = None
_state_lock = threading.Lock()
_log = get_logger(__name__)


def initialise(overrides: RuntimeOverrides | None = None) -> RuntimeState:
    global _state
    with _state_lock:
        if _state is not None:
            return _state

        overrides = overrides or RuntimeOverrides()
        settings = overrides.settings or ThumbnailerSettings()
        configure_logging(
            overrides.log_level or settings.log_level, json_logs=settings.log_json
        )

        storage: StorageClient
        if overrides.storage is not None:
            storage = overrides.storage
        else:
            storage = MinioStorage.from_settings(settings)

        _state = RuntimeState(settings=settings, storage=storage)
        _log.info(
            "thumbnailer-runtime-initialised", staging_root=str(settings.staging_root)
        )
        return _state


def shutdown() -> None:
    global _state
    with _state_lock:
        if _state is None:
            return
        _state = None
        _log.info("thumbnailer-runtime-shutdown")


def get_runtime() -> RuntimeState:
    state = _state
    if state is None:
        raise RuntimeError("Thumbnailer runtime has not been initialised")
    return state
