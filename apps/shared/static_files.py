"""Static frontend bundle with single-page-application fallback."""

import logging
import os
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import FileResponse

from apps.shared.errors import error_response

logger = logging.getLogger(__name__)

INDEX_FILE = "index.html"
SERVED_METHODS = {"GET", "HEAD"}
ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def resolve_static_path(root: str, request_path: str) -> Optional[str]:
    """
    Map a request path to a file inside root.
    Returns None for directories, missing files and anything outside root.
    """
    root = os.path.realpath(root)
    candidate = os.path.realpath(os.path.join(root, request_path.lstrip("/")))
    if not candidate.startswith(root + os.sep):
        return None
    if not os.path.isfile(candidate):
        return None
    return candidate


def setup_spa_fallback(app: FastAPI, static_dir: str, api_prefix: str = "/api") -> None:
    """
    Serve files from static_dir and fall back to its index.html.

    Must be called after every other route is registered, since the
    catch-all route would otherwise shadow them.
    """
    api_root = api_prefix.strip("/")

    if not os.path.isfile(os.path.join(static_dir, INDEX_FILE)):
        logger.warning(f"No frontend bundle found at {static_dir}")

    @app.api_route("/{full_path:path}", methods=ALL_METHODS, include_in_schema=False)
    def frontend(full_path: str, request: Request):
        """Serve a bundle file, or the index document for client-side routes."""
        # Unmatched API calls and non-read methods never fall through to the bundle
        if request.method not in SERVED_METHODS:
            return error_response(404, "Not found.")
        if full_path == api_root or full_path.startswith(api_root + "/"):
            return error_response(404, "Not found.")

        file_path = resolve_static_path(static_dir, full_path)
        if file_path:
            return FileResponse(file_path)

        index_path = os.path.join(static_dir, INDEX_FILE)
        if not os.path.isfile(index_path):
            return error_response(404, "Not found.")
        return FileResponse(index_path)
