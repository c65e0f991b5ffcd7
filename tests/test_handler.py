from __future__ import annotations

import base64
import json
from pathlib import Path
from typing import Any

import pytest

from thumbnailer import bootstrap
from thumbnailer.__main__ import main
from thumbnailer.bootstrap import RuntimeState
from thumbnailer.handler import handle
from thumbnailer.storage import InMemoryStorage

from .factories import ImageFactory, seed

REQUEST: dict[str, Any] = {
    "src_key": "a/b.jpg",
    "src_bucket": "in",
    "dst_bucket": "out",
    "root_folder": "thumbs",
    "preset_name": "w200",
    "rewrite_part": "a",
    "width": 200,
}


def test_handle_returns_published_thumbnail(
    runtime: RuntimeState, storage: InMemoryStorage, make_image: ImageFactory
) -> None:
    seed(storage, "in", "a/b.jpg", make_image())

    response = handle(REQUEST, runtime)

    assert response.status is True
    assert response.key == "thumbs/w200/b.jpg"
    assert response.content_type == "image/jpeg"
    stored = storage.get("out", "thumbs/w200/b.jpg")
    assert stored is not None
    assert base64.b64decode(response.data) == stored.data


@pytest.mark.parametrize(
    "overrides,field",
    [
        ({"width": 0}, "width"),
        ({"width": -5}, "width"),
        ({"width": "200"}, "width"),
        ({"preset_name": ""}, "preset_name"),
        ({"root_folder": "   "}, "root_folder"),
    ],
)
def test_handle_rejects_invalid_requests(
    runtime: RuntimeState,
    storage: InMemoryStorage,
    overrides: dict[str, Any],
    field: str,
) -> None:
    response = handle({**REQUEST, **overrides}, runtime)

    assert response.status is False
    assert response.error.startswith("Invalid request:")
    assert field in response.error
    assert storage.keys("out") == []


def test_handle_rejects_missing_fields(runtime: RuntimeState) -> None:
    payload = {key: value for key, value in REQUEST.items() if key != "src_key"}

    response = handle(payload, runtime)

    assert response.status is False
    assert "src_key" in response.error


def test_handle_reports_missing_source(runtime: RuntimeState) -> None:
    response = handle(REQUEST, runtime)

    assert response.model_dump() == {
        "status": False,
        "key": "",
        "content_type": "",
        "data": "",
        "error": "File a/b.jpg not exists in in",
    }


def test_generate_thumbnail_task(
    runtime: RuntimeState, storage: InMemoryStorage, make_image: ImageFactory
) -> None:
    from thumbnailer.tasks import generate_thumbnail

    seed(storage, "in", "a/b.jpg", make_image())

    result = generate_thumbnail(dict(REQUEST))

    assert result["status"] is True
    assert result["key"] == "thumbs/w200/b.jpg"
    assert result["error"] == ""


def test_main_reads_request_file(
    runtime: RuntimeState,
    storage: InMemoryStorage,
    make_image: ImageFactory,
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    seed(storage, "in", "a/b.jpg", make_image())
    request_file = tmp_path / "request.json"
    request_file.write_text(json.dumps(REQUEST), encoding="utf-8")

    exit_code = main([str(request_file)])

    output = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert output["status"] is True
    assert output["key"] == "thumbs/w200/b.jpg"


def test_main_rejects_malformed_json(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    request_file = tmp_path / "request.json"
    request_file.write_text("{not json", encoding="utf-8")

    exit_code = main([str(request_file)])

    output = json.loads(capsys.readouterr().out)
    assert exit_code == 1
    assert output["status"] is False
    assert output["error"].startswith("Unable to read request")


def test_main_reports_invalid_environment(
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    bootstrap.shutdown()
    monkeypatch.setenv("THUMBNAILER_LOG_JSON", "not-a-boolean")
    request_file = tmp_path / "request.json"
    request_file.write_text(json.dumps(REQUEST), encoding="utf-8")

    exit_code = main([str(request_file)])

    output = json.loads(capsys.readouterr().out)
    assert exit_code == 1
    assert output["status"] is False
    assert output["error"].startswith("Invalid configuration")
