"""Local development server exposing every route in one process.

    python -m rpg_card.server --port 8000
"""

from __future__ import annotations

import argparse
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import urlparse

from . import handlers
from .log import configure_logging, get_logger

logger = get_logger(__name__)


class RouterHandler(BaseHTTPRequestHandler):
    def do_GET(self):
        path = urlparse(self.path).path
        if path == "/":
            handlers.respond_with_health(self)
        elif path.startswith("/rpg/"):
            handlers.respond_with_card(self)
        elif path.startswith("/preview/"):
            handlers.respond_with_preview(self)
        else:
            handlers.respond_not_found(self)

    def log_message(self, format, *args):
        logger.debug("http_request", client=self.client_address[0], line=format % args)


def make_server(host: str = "127.0.0.1", port: int = 8000) -> ThreadingHTTPServer:
    return ThreadingHTTPServer((host, port), RouterHandler)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Serve RPG profile cards locally.")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    args = parser.parse_args(argv)

    configure_logging()
    server = make_server(args.host, args.port)
    logger.info("server_started", host=args.host, port=server.server_address[1])
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.server_close()


if __name__ == "__main__":
    main()
