from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

from celery import Celery, signals
from celery.utils.dispatch.signal import Signal

from .bootstrap import initialise, shutdown
from .config import ThumbnailerSettings
from .constants import TASK_NAMESPACE
from .logging import configure_logging

T = TypeVar("T", bound=Callable[..., Any])


def _connect_signal(signal: Signal, **connect_kwargs: Any) -> Callable[[T], T]:
    def decorator(func: T) -> T:
        signal.connect(func, **connect_kwargs)
        return func

    return decorator


_settings = ThumbnailerSettings()
configure_logging(_settings.log_level, json_logs=_settings.log_json)

celery_app = Celery(
    "thumbnailer",
    broker=_settings.celery_broker_url,
    backend=_settings.celery_result_backend,
    include=[f"{TASK_NAMESPACE}.tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    worker_prefetch_multiplier=1,
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    broker_connection_retry_on_startup=True,
    task_default_queue="thumbnails",
    worker_hijack_root_logger=False,
)

celery_app.conf.task_routes = {
    f"{TASK_NAMESPACE}.generate_thumbnail": {"queue": "thumbnails"},
}


@_connect_signal(signals.worker_init)
def _on_worker_init(**_: object) -> None:
    initialise()


@_connect_signal(signals.worker_shutdown)
def _on_worker_shutdown(**_: object) -> None:
    shutdown()
