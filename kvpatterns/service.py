"""HTTP front end for the key-value store, backed by a transaction log."""

from __future__ import annotations

import argparse
import logging
import queue
import re
import threading
from typing import Callable, Iterable
from urllib.parse import quote
from wsgiref.simple_server import make_server

from kvpatterns.store import KeyValueStore, NoSuchKey
from kvpatterns.transact import EventType, FileTransactionLogger, TransactionLogger

log = logging.getLogger(__name__)

_KEY_PATH = re.compile(r"^/v1/([^/]+)$")
_COLLECTION_PATH = "/v1"

_STATUS_TEXT = {
    200: "OK",
    201: "Created",
    404: "Not Found",
    405: "Method Not Allowed",
    500: "Internal Server Error",
}


class _HTTPError(Exception):
    def __init__(self, status: int, message: str) -> None:
        super().__init__(message)
        self.status = status
        self.message = message


def _status_line(status: int) -> str:
    return f"{status} {_STATUS_TEXT[status]}"


def _request_uri(environ: dict) -> str:
    uri = quote(environ.get("SCRIPT_NAME", "") + environ.get("PATH_INFO", ""))
    query = environ.get("QUERY_STRING")
    return f"{uri}?{query}" if query else uri


def _read_body(environ: dict) -> bytes:
    try:
        length = int(environ.get("CONTENT_LENGTH") or 0)
    except ValueError:
        length = 0
    stream = environ.get("wsgi.input")
    if stream is None or length <= 0:
        return b""
    return stream.read(length)


class KeyValueService:
    """WSGI application serving GET, PUT and DELETE on ``/v1/<key>``.

    Successful puts and deletes are recorded on ``logger`` when one is given.
    """

    def __init__(self, store: KeyValueStore, logger: TransactionLogger | None = None) -> None:
        self.store = store
        self.logger = logger

    def __call__(self, environ: dict, start_response: Callable) -> Iterable[bytes]:
        method = environ.get("REQUEST_METHOD", "GET").upper()
        log.info("%s %s", method, _request_uri(environ))
        path = environ.get("PATH_INFO", "")

        try:
            match = _KEY_PATH.match(path)
            if match is None:
                if path == _COLLECTION_PATH:
                    raise _HTTPError(405, "Not Allowed")
                raise _HTTPError(404, "404 page not found")
            key = match.group(1)
            if method == "GET":
                status, body = 200, self._get(key)
            elif method == "PUT":
                status, body = 201, self._put(key, environ)
            elif method == "DELETE":
                status, body = 200, self._delete(key)
            else:
                raise _HTTPError(405, "Not Allowed")
        except _HTTPError as err:
            payload = (err.message + "\n").encode("utf-8")
            start_response(
                _status_line(err.status),
                [
                    ("Content-Type", "text/plain; charset=utf-8"),
                    ("X-Content-Type-Options", "nosniff"),
                    ("Content-Length", str(len(payload))),
                ],
            )
            return [payload]

        start_response(
            _status_line(status),
            [
                ("Content-Type", "text/plain; charset=utf-8"),
                ("Content-Length", str(len(body))),
            ],
        )
        return [body]

    def _get(self, key: str) -> bytes:
        try:
            value = self.store.get(key)
        except NoSuchKey as err:
            raise _HTTPError(404, str(err)) from None
        except Exception as err:
            raise _HTTPError(500, str(err)) from None
        log.info("GET key=%s", key)
        return value.encode("utf-8")

    def _put(self, key: str, environ: dict) -> bytes:
        try:
            value = _read_body(environ).decode("utf-8", errors="replace")
            self.store.put(key, value)
        except Exception as err:
            raise _HTTPError(500, str(err)) from None
        if self.logger is not None:
            self.logger.write_put(key, value)
        log.info("PUT key=%s value=%s", key, value)
        return b""

    def _delete(self, key: str) -> bytes:
        try:
            self.store.delete(key)
        except Exception as err:
            raise _HTTPError(500, str(err)) from None
        if self.logger is not None:
            self.logger.write_delete(key)
        log.info("DELETE key=%s", key)
        return b""


def _report_errors(errors: queue.Queue) -> None:
    while True:
        log.error("%s", errors.get())


def initialize_transaction_log(store: KeyValueStore, logger: TransactionLogger) -> int:
    """Replay ``logger`` into ``store``, then start the logger; return the events replayed.

    A read failure is raised after the logger has been started.
    """
    count = 0
    try:
        for event in logger.read_events():
            if event.event_type is EventType.DELETE:
                store.delete(event.key)
            else:
                store.put(event.key, event.value)
            count += 1
    finally:
        log.info("%d events replayed", count)
        logger.run()
        threading.Thread(target=_report_errors, args=(logger.errors(),), daemon=True).start()
    return count


def main(argv: list[str] | None = None) -> None:
    """Load the transaction log and serve the key-value store over HTTP."""
    parser = argparse.ArgumentParser(description="Serve a key-value store over HTTP.")
    parser.add_argument("--host", default="")
    parser.add_argument("--port", type=int, default=8080)
    parser.add_argument("--log", default="transactions.log", help="transaction log file")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    store = KeyValueStore()
    with FileTransactionLogger(args.log) as logger:
        initialize_transaction_log(store, logger)
        with make_server(args.host, args.port, KeyValueService(store, logger)) as server:
            server.serve_forever()


if __name__ == "__main__":
    main()