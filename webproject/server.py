"""Preview server.

Serves the directory of the generated page.  Every request for the page
itself rebuilds it first, so edits to any source show up on reload.  The
app is meant for local development; it runs single threaded because the
builder is not safe to share between requests.
"""

from __future__ import annotations

import logging
from pathlib import Path

from flask import Flask, Response, request

from .builder import PageBuilder

logger = logging.getLogger(__name__)

CONTENT_TYPES = {
    ".html": "text/html;charset=utf-8",
    ".htm": "text/html;charset=utf-8",
    ".css": "text/css;charset=utf-8",
    ".js": "text/javascript;charset=utf-8",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
}
DEFAULT_CONTENT_TYPE = "application/octet-stream"


def content_type_for(path: str | Path) -> str:
    return CONTENT_TYPES.get(Path(path).suffix.lower(), DEFAULT_CONTENT_TYPE)


def resolve_request_path(base_dir: Path, output_path: Path, req_path: str) -> Path:
    """Map a URL path below ``base_dir``.

    Empty, ``.`` and ``..`` segments are dropped so a request can never
    leave ``base_dir``.  The bare directory maps to the page itself.
    """

    file_path = base_dir
    for part in req_path.split("?", 1)[0].split("/"):
        if part and part not in (".", ".."):
            file_path = file_path / part
    if file_path == base_dir:
        return output_path
    return file_path


def create_app(builder: PageBuilder, output_path: str | Path) -> Flask:
    """Return a Flask app serving ``output_path`` and its sibling files.

    ``builder`` must already have been prepared and built once; requests
    for the page call :meth:`PageBuilder.rebuild`.
    """

    output_path = Path(output_path).absolute()
    base_dir = output_path.parent
    app = Flask(__name__, static_folder=None)

    @app.route("/", defaults={"req_path": ""}, methods=["GET"])
    @app.route("/<path:req_path>", methods=["GET"])
    def serve(req_path: str):
        file_path = resolve_request_path(base_dir, output_path, req_path)
        if file_path == output_path:
            try:
                builder.rebuild()
            except OSError as exc:
                logger.exception("Rebuild of %s failed", output_path)
                return Response(f"Build failed: {exc}", status=500, content_type="text/plain")

        if not file_path.is_file():
            logger.info("GET %s -> %s NOT FOUND!", request.path, file_path)
            return Response("Not found", status=404, content_type="text/plain")

        content_type = content_type_for(file_path)
        logger.info("GET %s -> %s %s", request.path, file_path, content_type)
        return Response(file_path.read_bytes(), status=200, content_type=content_type)

    @app.after_request
    def no_cache(response):
        response.headers["Cache-Control"] = "no-store"
        return response

    return app


def run_server(app: Flask, host: str, port: int) -> None:
    logger.info("Server started at http://%s:%d/ . Press Ctrl-C to stop", host, port)
    app.run(host=host, port=port, threaded=False, use_reloader=False)


__all__ = ["CONTENT_TYPES", "content_type_for", "create_app", "resolve_request_path", "run_server"]
