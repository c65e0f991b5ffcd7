"""Run one thumbnail request read as JSON from a file or stdin."""

from __future__ import annotations

import json
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from . import bootstrap
from .exceptions import StorageError
from .handler import handle
from .schemas import ThumbnailResponse


def _read_payload(argv: Sequence[str]) -> Any:
    if argv and argv[0] != "-":
        return json.loads(Path(argv[0]).read_text(encoding="utf-8"))
    return json.load(sys.stdin)


def _respond(payload: dict[str, Any]) -> ThumbnailResponse:
    try:
        runtime = bootstrap.initialise()
    except ValidationError as exc:
        return ThumbnailResponse.failure(f"Invalid configuration: {exc}")
    except StorageError as exc:
        return ThumbnailResponse.failure(str(exc))
    try:
        return handle(payload, runtime)
    finally:
        bootstrap.shutdown()


def main(argv: Sequence[str] | None = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    try:
        payload = _read_payload(args)
    except (OSError, json.JSONDecodeError) as exc:
        response = ThumbnailResponse.failure(f"Unable to read request: {exc}")
    else:
        if isinstance(payload, dict):
            response = _respond(payload)
        else:
            response = ThumbnailResponse.failure("Request must be a JSON object")

    print(response.model_dump_json())
    return 0 if response.status else 1


if __name__ == "__main__":
    raise SystemExit(main())
