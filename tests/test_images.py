from __future__ import annotations

import io
from pathlib import Path

import pytest
from PIL import Image

from thumbnailer.exceptions import ImageDecodeError, ImageEncodeError, StagingError
from thumbnailer.images import (
    render_thumbnail,
    resize_image,
    target_size,
    transformed_path,
)

from .factories import ImageFactory


@pytest.mark.parametrize(
    "source,width,expected",
    [
        ((1000, 500), 200, (200, 100)),
        ((333, 500), 100, (100, 150)),
        ((640, 480), 1280, (1280, 960)),
        ((3, 2), 5, (5, 3)),
        ((4000, 10), 100, (100, 1)),
    ],
)
def test_target_size_preserves_aspect_ratio(
    source: tuple[int, int], width: int, expected: tuple[int, int]
) -> None:
    assert target_size(source, width) == expected


@pytest.mark.parametrize("width", [0, -10])
def test_target_size_rejects_non_positive_width(width: int) -> None:
    with pytest.raises(ValueError):
        target_size((100, 100), width)


def test_transformed_path_prefixes_marker(tmp_path: Path) -> None:
    source = tmp_path / "in" / "a" / "b.jpg"

    assert transformed_path(source) == tmp_path / "in" / "a" / "tmp_prew_b.jpg"


def test_resize_image_writes_jpeg_thumbnail(
    tmp_path: Path, make_image: ImageFactory
) -> None:
    source = tmp_path / "b.jpg"
    source.write_bytes(make_image(size=(1000, 500)))

    result = resize_image(source, 200)

    assert result == tmp_path / "tmp_prew_b.jpg"
    assert source.exists()
    with Image.open(result) as thumb:
        assert thumb.format == "JPEG"
        assert thumb.size == (200, 100)


def test_render_thumbnail_converts_png_with_alpha_to_jpeg(
    make_image: ImageFactory,
) -> None:
    png = make_image(
        size=(300, 600), image_format="PNG", mode="RGBA", color=(0, 0, 255, 128)
    )

    thumbnail = render_thumbnail(png, 150)

    with Image.open(io.BytesIO(thumbnail)) as thumb:
        assert thumb.format == "JPEG"
        assert thumb.mode == "RGB"
        assert thumb.size == (150, 300)


def test_render_thumbnail_rejects_corrupt_data() -> None:
    with pytest.raises(ImageDecodeError):
        render_thumbnail(b"\xff\xd8\xff\xe0" + b"\x00" * 64, 100)


def test_render_thumbnail_rejects_truncated_jpeg(make_image: ImageFactory) -> None:
    jpeg = make_image(size=(400, 400), color="green")

    with pytest.raises(ImageDecodeError):
        render_thumbnail(jpeg[: len(jpeg) // 2], 100)


def test_render_thumbnail_rejects_zero_width(make_image: ImageFactory) -> None:
    with pytest.raises(ValueError):
        render_thumbnail(make_image(), 0)


def test_resize_image_replaces_stale_output(
    tmp_path: Path, make_image: ImageFactory
) -> None:
    source = tmp_path / "b.png"
    source.write_bytes(make_image(size=(50, 100), image_format="PNG"))
    stale = tmp_path / "tmp_prew_b.png"
    stale.write_bytes(b"left over from a crashed run")

    result = resize_image(source, 25)

    assert result == stale
    with Image.open(result) as thumb:
        assert thumb.size == (25, 50)


def test_resize_image_fails_when_stale_output_cannot_be_removed(
    tmp_path: Path, make_image: ImageFactory
) -> None:
    source = tmp_path / "b.jpg"
    source.write_bytes(make_image())
    blocker = tmp_path / "tmp_prew_b.jpg"
    blocker.mkdir()
    (blocker / "child").write_text("x", encoding="utf-8")

    with pytest.raises(StagingError):
        resize_image(source, 100)


def test_render_thumbnail_refuses_formats_outside_whitelist(
    make_image: ImageFactory,
) -> None:
    with pytest.raises(ImageDecodeError):
        render_thumbnail(make_image(size=(20, 20), image_format="GIF"), 10)


def test_render_thumbnail_reports_encoder_failure(
    make_image: ImageFactory, monkeypatch: pytest.MonkeyPatch
) -> None:
    def failing_save(
        self: Image.Image, fp: object, *args: object, **kwargs: object
    ) -> None:
        raise OSError("encoder error -2 when writing image file")

    source = make_image(size=(100, 100))
    monkeypatch.setattr(Image.Image, "save", failing_save)

    with pytest.raises(ImageEncodeError):
        render_thumbnail(source, 50)
