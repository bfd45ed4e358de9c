import logging
import threading
import webbrowser
from pathlib import Path
from typing import List, Optional

from werkzeug.serving import make_server

from app import create_app
from devserve.log import configure_logging
from devserve.params import parse_or_exit
from devserve.reload_channel import ReloadChannel
from devserve.watcher import ChangeWatcher

logger = logging.getLogger("devserve")


def _display_host(host: str) -> str:
    if host in ("", "0.0.0.0", "::"):
        return "localhost"
    return host


def main(argv: Optional[List[str]] = None) -> None:
    config = parse_or_exit(argv)
    configure_logging(config.verbose)
    logger.debug("Configuration: %s", config)

    directory = Path(config.dirpath).expanduser().resolve()
    if not directory.is_dir():
        raise SystemExit(f"Directory not found: {directory}")

    channel = ReloadChannel()
    app = create_app(config, channel)

    watcher = None
    if config.watch:
        watcher = ChangeWatcher(directory, channel.broadcast)
        if not watcher.start():
            watcher = None

    try:
        httpd = make_server(config.host, config.port, app, threaded=True)
    except OSError as exc:
        if watcher is not None:
            watcher.stop()
        raise SystemExit(f"Cannot listen on {config.host}:{config.port}: {exc}")

    url = f"http://{_display_host(config.host)}:{config.port}/"
    print(f"Serving {directory} at {url} (Ctrl+C to stop)", flush=True)
    if watcher is not None:
        print("Live reload: on", flush=True)
    if config.open:
        threading.Timer(0.8, lambda: webbrowser.open(url)).start()

    try:
        httpd.serve_forever()
    except KeyboardInterrupt:
        print("\nServer stopped.")
    finally:
        if watcher is not None:
            watcher.stop()
        channel.close()
        httpd.server_close()


if __name__ == "__main__":
    main()
