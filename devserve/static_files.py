"""Static file responses for the development server."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Dict, Optional

from flask import Response

from devserve.paths import DEFAULT_DOCUMENT, resolve_file

logger = logging.getLogger(__name__)

FileTransform = Callable[[bytes], bytes]

DEFAULT_MIME_TYPE = "text/plain"

MIME_TYPES: Dict[str, str] = {
    ".ico": "image/x-icon",
    ".html": "text/html",
    ".htm": "text/html",
    ".js": "text/javascript",
    ".mjs": "text/javascript",
    ".json": "application/json",
    ".map": "application/json",
    ".css": "text/css",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".wav": "audio/wav",
    ".mp3": "audio/mpeg",
    ".mp4": "video/mp4",
    ".svg": "image/svg+xml",
    ".pdf": "application/pdf",
    ".zip": "application/zip",
    ".wasm": "application/wasm",
    ".doc": "application/msword",
    ".eot": "application/vnd.ms-fontobject",
    ".ttf": "application/x-font-ttf",
    ".woff": "font/woff",
    ".woff2": "font/woff2",
    ".txt": "text/plain",
}

RELOAD_SNIPPET = (
    "<script type=\"text/javascript\">"
    "new EventSource('/reload').onmessage=()=>window.location.reload()"
    "</script>"
)


def guess_mime_type(path: str | Path) -> str:
    return MIME_TYPES.get(Path(path).suffix.lower(), DEFAULT_MIME_TYPE)


def inject_reload_script(data: bytes) -> bytes:
    content = data.decode("utf-8", errors="replace")
    if "</head>" in content:
        content = content.replace("</head>", RELOAD_SNIPPET + "</head>", 1)
    else:
        content = content + RELOAD_SNIPPET
    return content.encode("utf-8")


def not_found(message: str) -> Response:
    return Response(message, status=404, mimetype="text/plain")


def serve_file(path: str | Path, transforms: Optional[Dict[str, FileTransform]] = None) -> Response:
    """Read ``path`` and wrap it in a response, or answer 404 if it cannot be read."""
    path = Path(path)
    try:
        data = path.read_bytes()
    except (OSError, ValueError) as exc:
        logger.debug("Read failed for %s: %s", path, exc)
        return not_found(f"'{path}' not found")

    ext = path.suffix.lower()
    transform = (transforms or {}).get(ext)
    if transform:
        data = transform(data)
    return Response(data, status=200, mimetype=guess_mime_type(path))


def serve_static(
    pathname: str,
    directory: str | Path,
    *,
    prefix: str = "",
    runtime_routing: bool = False,
    transforms: Optional[Dict[str, FileTransform]] = None,
) -> Response:
    """Serve ``pathname`` from ``directory``.

    With ``runtime_routing`` a path that does not exist falls back to the root's
    default document, which is what single-page applications expect.
    """
    filepath = resolve_file(pathname, directory, prefix)
    if filepath is None:
        return not_found(f"'{pathname}' not found")
    if not filepath.is_file() and runtime_routing:
        filepath = Path(directory) / DEFAULT_DOCUMENT
    return serve_file(filepath, transforms)
