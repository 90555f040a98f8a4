"""Requests, responses, routing and the WSGI server."""

from __future__ import annotations

import json as _json
import logging
import re
import signal
import threading
from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any, Callable, Optional
from wsgiref.simple_server import WSGIRequestHandler, make_server

from .models import to_json

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1
_ID_PATTERN = re.compile(r"[+-]?[0-9]+")
_PARAM = re.compile(r"\{([A-Za-z_][A-Za-z0-9_]*)(?::([^{}]+))?\}")

_CORS_METHODS = frozenset({"GET", "POST", "PUT", "DELETE", "OPTIONS", "HEAD"})
_CORS_HEADERS = frozenset({
    "Accept", "Accept-Language", "Content-Language", "Origin",
    "X-Requested-With", "Content-Type", "Authorization", "X-App-Token",
})


@dataclass
class Request:
    """An incoming request, with the repository and path values attached."""

    method: str = "GET"
    path: str = "/"
    body: bytes = b""
    headers: dict = field(default_factory=dict)
    params: dict = field(default_factory=dict)
    repo: Any = None
    user_id: Optional[int] = None

    def json(self):
        """Decode the first JSON value in the body; raise ValueError if none."""
        text = self.body.decode("utf-8").lstrip()
        value, _ = _json.JSONDecoder().raw_decode(text)
        return value


@dataclass
class Response:
    """An outgoing response."""

    status: int = 200
    body: bytes = b""
    headers: dict = field(default_factory=dict)

    def json(self):
        """Decode the body as JSON."""
        return _json.loads(self.body)


def json_response(status, value):
    """A response carrying ``value`` as JSON."""
    body = (to_json(value) + "\n").encode("utf-8")
    return Response(int(status), body, {"Content-Type": "application/json"})


def write_error(status, message):
    """A JSON error response."""
    return json_response(status, {"error": message})


def parse_id(raw, message):
    """Parse a signed 64-bit decimal id; raise ValueError(message) if it is not one."""
    if raw is None or not _ID_PATTERN.fullmatch(raw):
        raise ValueError(message)
    value = int(raw)
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise ValueError(message)
    return value


def _compile(path):
    parts = []
    pos = 0
    for match in _PARAM.finditer(path):
        parts.append(re.escape(path[pos:match.start()]))
        parts.append(f"(?P<{match.group(1)}>{match.group(2) or '[^/]+'})")
        pos = match.end()
    parts.append(re.escape(path[pos:]))
    return re.compile("".join(parts))


@dataclass(frozen=True)
class _Route:
    pattern: re.Pattern
    handler: Callable[[Request], Response]
    methods: frozenset


def _header_name(raw):
    return raw.replace("_", "-").title()


def _request_from_environ(environ, repo=None):
    headers = {}
    for key, value in environ.items():
        if key.startswith("HTTP_"):
            headers[_header_name(key[5:])] = value
    if environ.get("CONTENT_TYPE"):
        headers["Content-Type"] = environ["CONTENT_TYPE"]
    try:
        length = int(environ.get("CONTENT_LENGTH") or 0)
    except ValueError:
        length = 0
    body = environ["wsgi.input"].read(length) if length > 0 else b""
    return Request(
        method=environ.get("REQUEST_METHOD", "GET").upper(),
        path=environ.get("PATH_INFO") or "/",
        body=body,
        headers=headers,
        repo=repo,
    )


def _send(response, start_response):
    try:
        phrase = HTTPStatus(response.status).phrase
    except ValueError:
        phrase = "Unknown"
    headers = list(response.headers.items())
    headers.append(("Content-Length", str(len(response.body))))
    start_response(f"{response.status} {phrase}", headers)
    return [response.body]


class Router:
    """Matches request paths and methods to handlers."""

    def __init__(self):
        self._routes: list[_Route] = []

    def add_route(self, path, handler, methods):
        """Register ``handler`` for ``path`` (with ``{name}`` parts) and methods."""
        self._routes.append(
            _Route(_compile(path), handler, frozenset(m.upper() for m in methods))
        )

    def dispatch(self, request):
        """Run the matching handler; 405 if only the method is wrong, else 404."""
        method_mismatch = False
        for route in self._routes:
            match = route.pattern.fullmatch(request.path)
            if match is None:
                continue
            if request.method.upper() in route.methods:
                request.params = {**request.params, **match.groupdict()}
                return route.handler(request)
            method_mismatch = True
        if method_mismatch:
            return Response(HTTPStatus.METHOD_NOT_ALLOWED)
        return Response(
            HTTPStatus.NOT_FOUND,
            b"404 page not found\n",
            {"Content-Type": "text/plain; charset=utf-8"},
        )

    def __call__(self, environ, start_response):
        return _send(self.dispatch(_request_from_environ(environ)), start_response)


def _preflight(request):
    requested = request.headers.get("Access-Control-Request-Method", "").upper()
    if requested not in _CORS_METHODS:
        return Response(HTTPStatus.METHOD_NOT_ALLOWED)
    wanted = [
        _header_name(name.strip())
        for name in request.headers.get("Access-Control-Request-Headers", "").split(",")
        if name.strip()
    ]
    if any(name not in _CORS_HEADERS for name in wanted):
        return Response(HTTPStatus.FORBIDDEN)
    headers = {"Access-Control-Allow-Methods": requested}
    if wanted:
        headers["Access-Control-Allow-Headers"] = ",".join(wanted)
    return Response(HTTPStatus.OK, b"", headers)


def make_app(router, repo):
    """A WSGI application that hands ``repo`` to every request and applies CORS."""

    def app(environ, start_response):
        request = _request_from_environ(environ, repo)
        if request.method == "OPTIONS":
            if "Access-Control-Request-Method" not in request.headers:
                response = Response(HTTPStatus.BAD_REQUEST)
            else:
                response = _preflight(request)
                if response.status != HTTPStatus.OK:
                    return _send(response, start_response)
        else:
            response = router.dispatch(request)
        response.headers["Access-Control-Allow-Origin"] = "*"
        return _send(response, start_response)

    return app


def run(app, host="", port=8080, logger=None):
    """Serve ``app`` until SIGINT or SIGTERM, then shut down cleanly."""
    log = logger or logging.getLogger(__name__)

    class _Handler(WSGIRequestHandler):
        timeout = 5

        def log_message(self, format, *args):
            log.info(
                "%s - - [%s] %s",
                self.address_string(), self.log_date_time_string(), format % args,
            )

    server = make_server(host, port, app, handler_class=_Handler)
    stop = threading.Event()
    previous = {
        sig: signal.signal(sig, lambda *_: stop.set())
        for sig in (signal.SIGINT, signal.SIGTERM)
    }
    worker = threading.Thread(target=server.serve_forever, daemon=True)
    try:
        log.info("server starting on %s:%d", host, port)
        worker.start()
        while not stop.wait(0.5):
            pass
        log.info("server stopped")
        server.shutdown()
        worker.join(5)
    finally:
        server.server_close()
        for sig, handler in previous.items():
            signal.signal(sig, handler)
    log.info("server exited properly")