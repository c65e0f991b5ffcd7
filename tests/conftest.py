from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from thumbnailer import bootstrap
from thumbnailer.bootstrap import RuntimeState
from thumbnailer.config import RuntimeOverrides, ThumbnailerSettings
from thumbnailer.storage import InMemoryStorage

from .factories import ImageFactory, encode_image


@pytest.fixture
def make_image() -> ImageFactory:
    return encode_image


@pytest.fixture
def staging_root(tmp_path: Path) -> Path:
    root = tmp_path / "staging"
    root.mkdir()
    return root


@pytest.fixture
def settings(staging_root: Path) -> ThumbnailerSettings:
    return ThumbnailerSettings(staging_root=staging_root)


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def runtime(
    settings: ThumbnailerSettings, storage: InMemoryStorage
) -> Iterator[RuntimeState]:
    bootstrap.shutdown()
    state = bootstrap.initialise(
        RuntimeOverrides(settings=settings, storage=storage, log_level="DEBUG")
    )
    try:
        yield state
    finally:
        bootstrap.shutdown()
