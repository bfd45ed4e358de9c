from __future__ import annotations

import re
import time
from pathlib import Path
from typing import Dict, Optional

from flask import Blueprint, Flask, Response, current_app, g, request

from devserve.log import DIM, DIM_RESET, GRAY, GREEN, RED, YELLOW, paint
from devserve.params import Configuration
from devserve.reload_channel import STREAM_HEADERS, ReloadChannel
from devserve.static_files import FileTransform, inject_reload_script, not_found, serve_static

API_PATH = re.compile(r"^/api/(\d+)(.*)$")
ANY_METHOD = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

routes = Blueprint("devserve", __name__)


def _channel() -> ReloadChannel:
    return current_app.extensions["reload_channel"]


def _config() -> Configuration:
    return current_app.config["DEVSERVE"]


def _transforms(config: Configuration) -> Optional[Dict[str, FileTransform]]:
    if not config.watch:
        return None
    return {".html": inject_reload_script, ".htm": inject_reload_script}


def _client_id() -> str:
    address = request.remote_addr or "unknown"
    port = request.environ.get("REMOTE_PORT")
    return f"{address}:{port}" if port else address


@routes.get("/reload")
def reload_stream() -> Response:
    subscription = _channel().register(_client_id())
    return Response(subscription, mimetype="text/event-stream", headers=STREAM_HEADERS)


@routes.route("/api", defaults={"subpath": ""}, methods=ANY_METHOD)
@routes.route("/api/<path:subpath>", methods=ANY_METHOD)
def api(subpath: str) -> Response:
    match = API_PATH.match(request.path)
    if match is None or not match.group(2).startswith("/"):
        return not_found("Invalid API endpoint")
    version, pathname = match.groups()
    return not_found(f"Unknown API endpoint '{pathname}' for version {version}")


@routes.route("/api/", methods=ANY_METHOD)
def api_root() -> Response:
    return api("")


@routes.route("/", defaults={"pathname": ""}, methods=ANY_METHOD)
@routes.route("/<path:pathname>", methods=ANY_METHOD)
def static_asset(pathname: str) -> Response:
    config = _config()
    return serve_static(
        request.path,
        current_app.config["DEVSERVE_ROOT"],
        runtime_routing=config.spa,
        transforms=_transforms(config),
    )


def format_duration(seconds: float) -> str:
    ms = seconds * 1000
    if ms < 1000:
        return f"{ms:.2f} ms"
    if ms < 1000 * 60:
        return f"{ms / 1000:.2f} s"
    if ms < 1000 * 60 * 60:
        return f"{ms / 1000 / 60:.2f} m"
    return f"{ms / 1000 / 3600:.2f} h"


def format_status(response: Response) -> str:
    status = response.status_code
    if status < 400:
        text = paint(status, GREEN)
        if response.content_type:
            text += " " + paint(response.content_type, GRAY)
        return text
    if status < 500:
        return paint(status, YELLOW)
    reason = response.status.split(" ", 1)[-1]
    return paint(status, RED) + " " + reason


def _start_timer() -> None:
    g.request_started = time.perf_counter()


def _log_request(response: Response) -> Response:
    elapsed = time.perf_counter() - g.get("request_started", time.perf_counter())
    current_app.logger.info(
        "%s %s %s %s",
        request.method,
        request.full_path.rstrip("?"),
        format_status(response),
        DIM + format_duration(elapsed) + DIM_RESET,
    )
    return response


def create_app(config: Configuration, channel: Optional[ReloadChannel] = None) -> Flask:
    app = Flask(__name__, static_folder=None)
    app.config.update(
        DEVSERVE=config,
        DEVSERVE_ROOT=Path(config.dirpath).expanduser().resolve(),
    )
    app.extensions["reload_channel"] = channel if channel is not None else ReloadChannel()
    app.before_request(_start_timer)
    app.after_request(_log_request)
    app.register_blueprint(routes)
    return app
