"""
HTTP serving of stored artifacts.
"""
import logging
import mimetypes
from email.utils import formatdate
from pathlib import Path
from typing import Iterator, Optional

from fastapi import HTTPException
from fastapi.responses import Response, StreamingResponse

from .storage import ArtifactStore, PathOutsideRootError

logger = logging.getLogger(__name__)

CACHE_CONTROL = "public, max-age=31536000, immutable"
STREAM_THRESHOLD = 1024 * 1024
CHUNK_SIZE = 64 * 1024


def make_etag(path: Path) -> str:
    stat = path.stat()
    return f'"{stat.st_mtime_ns // 1_000_000}-{stat.st_size}"'


def etag_matches(etag: str, if_none_match: Optional[str]) -> bool:
    if not if_none_match:
        return False
    candidates = [c.strip() for c in if_none_match.split(",")]
    return "*" in candidates or etag in candidates


def iter_file(path: Path, chunk_size: int = CHUNK_SIZE) -> Iterator[bytes]:
    with open(path, "rb") as f:
        while True:
            chunk = f.read(chunk_size)
            if not chunk:
                break
            yield chunk


def serve_artifact(store: ArtifactStore, relative_path: str, if_none_match: Optional[str] = None) -> Response:
    """
    Build the response for a stored file.

    Args:
        store: Artifact store holding the file
        relative_path: Path relative to the artifact root
        if_none_match: Value of the If-None-Match request header

    Raises:
        HTTPException: 400 for an empty path, 403 outside the root, 404 missing
    """
    if not relative_path:
        raise HTTPException(status_code=400, detail="File path not provided")

    try:
        file_path = store.resolve(relative_path)
    except PathOutsideRootError as e:
        logger.warning(f"Rejected image path: {e}")
        raise HTTPException(status_code=403, detail="Access denied")

    if not file_path.is_file():
        raise HTTPException(status_code=404, detail="File not found")

    stat = file_path.stat()
    etag = make_etag(file_path)
    if etag_matches(etag, if_none_match):
        return Response(status_code=304, headers={"ETag": etag})

    media_type, _ = mimetypes.guess_type(file_path.name)
    if not media_type:
        media_type = "application/octet-stream"
    headers = {
        "Cache-Control": CACHE_CONTROL,
        "X-Content-Type-Options": "nosniff",
        "ETag": etag,
        "Content-Length": str(stat.st_size),
    }
    if media_type.startswith("image/"):
        headers["X-Image-Generated"] = "true"
        headers["Last-Modified"] = formatdate(stat.st_mtime, usegmt=True)

    if stat.st_size > STREAM_THRESHOLD:
        return StreamingResponse(iter_file(file_path), media_type=media_type, headers=headers)

    return Response(content=file_path.read_bytes(), media_type=media_type, headers=headers)
