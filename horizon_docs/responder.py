"""Static asset resolution for horizon-docs.

Maps a request target onto the build directory. The chain is ordered and the
first match wins:
- /api/health answers a fixed JSON document.
- An exact file under the build root.
- The index.html inside a directory-style path.
- The custom 404.html at the build root.
- A plain-text "Not Found" with status 404.

Missing files, directories and I/O errors are all treated as "try the next
step". Nothing here touches sockets, so the chain can be exercised directly.
"""

from __future__ import annotations

import json
import posixpath
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import unquote, urlsplit

from .config import ServerConfig

HEALTH_PATH = "/api/health"
INDEX_FILENAME = "index.html"
NOT_FOUND_FILENAME = "404.html"
DEFAULT_CONTENT_TYPE = "application/octet-stream"

MIME_TYPES = {
    ".html": "text/html",
    ".css": "text/css",
    ".js": "application/javascript",
    ".json": "application/json",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".svg": "image/svg+xml",
    ".ico": "image/x-icon",
    ".woff2": "font/woff2",
    ".woff": "font/woff",
    ".txt": "text/plain",
    ".xml": "application/xml",
}

HEALTH_BODY = json.dumps({"status": "ok"}, separators=(",", ":")).encode("utf-8")


@dataclass(frozen=True)
class Response:
    """A fully materialized HTTP response.

    Attributes:
        status: HTTP status code.
        content_type: Value for the Content-Type header.
        body: Response payload.
        source: File the body was read from, or None for built-in bodies.
    """

    status: int
    content_type: str
    body: bytes
    source: Path | None = None


def content_type_for(path: Path) -> str:
    """Return the MIME type for a file based on its extension."""
    return MIME_TYPES.get(path.suffix, DEFAULT_CONTENT_TYPE)


def request_path(target: str) -> str:
    """Extract the decoded, dot-segment free path from a request target.

    ``.`` and ``..`` segments are removed and clamped at ``/``, so
    ``/../x.txt`` becomes ``/x.txt``. A trailing slash is kept.

    Args:
        target: Raw request target, e.g. ``/docs/intro?tab=1``.

    Returns:
        Percent-decoded path, always starting with a single ``/``.
    """
    path = unquote(urlsplit(target).path)
    if not path.startswith("/"):
        path = "/" + path
    normalized = "/" + posixpath.normpath(path).lstrip("/")
    if path.endswith("/") and normalized != "/":
        normalized += "/"
    return normalized


def resolve_request(config: ServerConfig, target: str) -> Response:
    """Run the resolution chain for a single request.

    Args:
        config: Server configuration (only build_dir and not_found_status are used).
        target: Raw request target including any query string.

    Returns:
        The Response to send. Never raises for missing or unreadable files.
    """
    path = request_path(target)
    if path == HEALTH_PATH:
        return Response(200, "application/json", HEALTH_BODY)

    root = _canonical_root(config.build_dir)
    if root is not None:
        candidate = root / path.lstrip("/")
        for option in (candidate, candidate / INDEX_FILENAME):
            if not _is_within(root, option):
                continue
            response = serve_file(option)
            if response is not None:
                return response

        response = serve_file(
            root / NOT_FOUND_FILENAME, status=config.not_found_status
        )
        if response is not None:
            return response

    return Response(404, "text/plain", b"Not Found")


def serve_file(path: Path, status: int = 200) -> Response | None:
    """Read a regular file into a Response.

    The content type follows ``path`` itself, not the target of a symlink.

    Args:
        path: Candidate file.
        status: Status to attach when the file is served.

    Returns:
        Response with the file bytes, or None when the file is absent or unreadable.
    """
    try:
        if not path.is_file():
            return None
        body = path.read_bytes()
    except (OSError, ValueError):
        return None
    return Response(status, content_type_for(path), body, source=path)


def _canonical_root(build_dir: Path) -> Path | None:
    try:
        return build_dir.resolve()
    except (OSError, RuntimeError):
        return None


def _is_within(root: Path, path: Path) -> bool:
    """Whether path, with symlinks followed, stays inside root."""
    try:
        resolved = path.resolve()
    except (OSError, RuntimeError, ValueError):
        return False
    return resolved == root or root in resolved.parents
