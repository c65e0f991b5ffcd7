"""Destination key derivation for published thumbnails."""

from __future__ import annotations

from pathlib import PurePath, PurePosixPath

from .constants import TRANSFORM_MARKER
from .exceptions import KeyRewriteError


def _segments(value: str) -> tuple[str, ...]:
    return tuple(part for part in value.split("/") if part and part != ".")


def _strip_marker(name: str) -> str:
    while TRANSFORM_MARKER in name:
        name = name.replace(TRANSFORM_MARKER, "")
    return name


def derive_destination_key(
    transformed_path: PurePath,
    staging_root: PurePath,
    src_bucket: str,
    rewrite_part: str,
    root_folder: str,
    preset_name: str,
) -> str:
    """Rewrite a staged thumbnail path into its destination object key.

    The ``{staging_root}/{src_bucket}/{rewrite_part}/`` prefix is removed from
    *transformed_path*, every occurrence of the transform marker is dropped and
    the remainder is placed under ``{root_folder}/{preset_name}/``. Paths that
    do not live under the rewrite segment keep everything below the bucket
    directory. The function is purely textual and never touches the
    filesystem.

    Raises:
        KeyRewriteError: If the root folder or preset name is empty, or the
            path is not inside the bucket's staging directory.
    """

    root = _segments(root_folder)
    preset = _segments(preset_name)
    if not root or not preset:
        raise KeyRewriteError("Root folder and preset name must not be empty")

    bucket_dir = PurePosixPath(staging_root.as_posix(), src_bucket)
    try:
        relative = PurePosixPath(transformed_path.as_posix()).relative_to(bucket_dir)
    except ValueError as exc:
        raise KeyRewriteError(
            f"{transformed_path} is not staged under bucket {src_bucket}"
        ) from exc

    parts = relative.parts
    rewrite = _segments(rewrite_part)
    if rewrite and parts[: len(rewrite)] == rewrite and len(parts) > len(rewrite):
        parts = parts[len(rewrite) :]
    if not parts:
        raise KeyRewriteError(f"{transformed_path} does not name a file")

    stripped = [_strip_marker(part) for part in parts]
    if not stripped[-1]:
        raise KeyRewriteError(f"{transformed_path} does not name a file")
    return "/".join((*root, *preset, *(part for part in stripped if part)))
