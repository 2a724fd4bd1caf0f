from __future__ import annotations

import logging
import os
import random
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator, Optional

from starlette.datastructures import UploadFile

log = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = 10 * 1024 * 1024
CHUNK_SIZE = 1024 * 1024


@dataclass
class UploadedImage:
    path: str
    mime_type: str
    size_bytes: int
    original_filename: str = ""


def unique_filename(original_filename: str) -> str:
    """`<epoch millis>-<0..1000><ext>`, e.g. `1718000000000-417.jpg`."""
    ext = os.path.splitext(original_filename or "")[1]
    return f"{int(time.time() * 1000)}-{random.randint(0, 1000)}{ext}"


def discard(path: str) -> None:
    try:
        os.unlink(path)
    except FileNotFoundError:
        pass
    except OSError:
        log.warning("Failed to remove temp file %s", path, exc_info=True)


def _open_unique(upload_dir: str, original_filename: str):
    while True:
        path = os.path.join(upload_dir, unique_filename(original_filename))
        try:
            return path, open(path, "xb")
        except FileExistsError:
            continue


def accept_upload(
    upload: Any,
    upload_dir: str,
    max_bytes: int = MAX_UPLOAD_BYTES,
) -> Optional[UploadedImage]:
    """
    Filter an incoming upload and persist it to `upload_dir`.

    Returns None when there is no file (a plain text form value counts as
    none), the MIME type is not `image/*`, or the body is larger than
    `max_bytes`. Rejections are not distinguished for the caller.
    """
    if not isinstance(upload, UploadFile) or not upload.filename:
        log.info("[UPLOAD] no file attached")
        return None

    mime_type = upload.content_type or ""
    if not mime_type.startswith("image/"):
        log.info("[UPLOAD] rejected '%s': mime type '%s'", upload.filename, mime_type)
        return None

    os.makedirs(upload_dir, exist_ok=True)
    path, out = _open_unique(upload_dir, upload.filename)
    size = 0
    with out:
        while True:
            chunk = upload.file.read(CHUNK_SIZE)
            if not chunk:
                break
            size += len(chunk)
            if size > max_bytes:
                break
            out.write(chunk)

    if size > max_bytes:
        discard(path)
        log.info("[UPLOAD] rejected '%s': larger than %d bytes", upload.filename, max_bytes)
        return None

    log.info("[UPLOAD] stored '%s' (%s, %d bytes) at %s", upload.filename, mime_type, size, path)
    return UploadedImage(
        path=path,
        mime_type=mime_type,
        size_bytes=size,
        original_filename=upload.filename,
    )


@contextmanager
def stored_upload(
    upload: Any,
    upload_dir: str,
    max_bytes: int = MAX_UPLOAD_BYTES,
) -> Iterator[Optional[UploadedImage]]:
    """
    Accept `upload` for the duration of the block.

    Yields the stored image (or None if it was filtered out). The file is
    removed when the block exits, whether it returns or raises.
    """
    image = accept_upload(upload, upload_dir, max_bytes)
    try:
        yield image
    finally:
        if image is not None:
            discard(image.path)
