from __future__ import annotations

from collections.abc import Callable
from typing import Any, ParamSpec, Protocol, TypeVar, cast

from celery import Task, states
from celery.result import AsyncResult

from . import bootstrap
from .celery_app import celery_app
from .constants import TASK_NAMESPACE
from .handler import handle
from .logging import get_logger

logger = get_logger(__name__)

P = ParamSpec("P")
R_co = TypeVar("R_co", covariant=True)


class RegisteredTask(Protocol[P, R_co]):
    name: str

    def __call__(self, *args: P.args, **kwargs: P.kwargs) -> R_co: ...

    def delay(self, *args: P.args, **kwargs: P.kwargs) -> AsyncResult[R_co]: ...

    def apply_async(
        self,
        args: tuple[Any, ...] | None = ...,
        kwargs: dict[str, Any] | None = ...,
        **options: Any,
    ) -> AsyncResult[R_co]: ...


def typed_task(
    *,
    name: str,
    bind: bool = False,
) -> Callable[[Callable[P, R_co]], RegisteredTask[P, R_co]]:
    raw_decorator = celery_app.task(name=name, bind=bind)
    return cast(Callable[[Callable[P, R_co]], RegisteredTask[P, R_co]], raw_decorator)


@typed_task(name=f"{TASK_NAMESPACE}.generate_thumbnail", bind=True)
def generate_thumbnail(task: Task, payload: dict[str, Any]) -> dict[str, Any]:
    runtime = bootstrap.get_runtime()
    response = handle(payload, runtime)
    result = response.model_dump()
    if not response.status:
        logger.warning("thumbnail-task-failed", error=response.error)
        if task.request.id is not None:
            task.update_state(state=states.FAILURE, meta=result)
    else:
        logger.info("thumbnail-task-completed", key=response.key)
    return result
