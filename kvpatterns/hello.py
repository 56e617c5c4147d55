"""A minimal web service that greets every request."""

from __future__ import annotations

import argparse
from typing import Callable, Iterable
from wsgiref.simple_server import make_server

_GREETING = b"Hello net/http!\n"


def hello_app(environ: dict, start_response: Callable) -> Iterable[bytes]:
    """WSGI application answering every path with a greeting."""
    start_response(
        "200 OK",
        [
            ("Content-Type", "text/plain; charset=utf-8"),
            ("Content-Length", str(len(_GREETING))),
        ],
    )
    return [_GREETING]


def main(argv: list[str] | None = None) -> None:
    """Serve the greeting application until interrupted."""
    parser = argparse.ArgumentParser(description="Serve a greeting over HTTP.")
    parser.add_argument("--host", default="")
    parser.add_argument("--port", type=int, default=8080)
    args = parser.parse_args(argv)

    with make_server(args.host, args.port, hello_app) as server:
        server.serve_forever()


if __name__ == "__main__":
    main()