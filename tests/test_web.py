import io
from wsgiref.util import setup_testing_defaults

import pytest

from ordermgmt.web import (
    Request,
    Response,
    Router,
    json_response,
    make_app,
    parse_id,
    write_error,
)


def _environ(method, path, body=b"", headers=None):
    environ = {}
    setup_testing_defaults(environ)
    environ["REQUEST_METHOD"] = method
    environ["PATH_INFO"] = path
    environ["wsgi.input"] = io.BytesIO(body)
    environ["CONTENT_LENGTH"] = str(len(body))
    for name, value in (headers or {}).items():
        environ["HTTP_" + name.upper().replace("-", "_")] = value
    return environ


def _call(app, environ):
    captured = {}

    def start_response(status, headers):
        captured["status"] = status
        captured["headers"] = dict(headers)

    body = b"".join(app(environ, start_response))
    return captured["status"], captured["headers"], body


def _echo(request):
    return json_response(200, {"params": request.params, "repo": request.repo})


def _router():
    router = Router()
    router.add_route("/items/{id}", _echo, ["GET"])
    router.add_route("/items", _echo, ["POST"])
    return router


@pytest.mark.parametrize("raw, expected", [("123", 123), ("-5", -5), ("+7", 7)])
def test_parse_id_accepts_integers(raw, expected):
    assert parse_id(raw, "invalid address ID") == expected


@pytest.mark.parametrize("raw", ["abc", "", " 1", "1.0", "9223372036854775808", None])
def test_parse_id_rejects_other_text(raw):
    with pytest.raises(ValueError, match="invalid company ID"):
        parse_id(raw, "invalid company ID")


def test_json_response_encodes_value():
    response = json_response(201, {"name": "Test Company"})
    assert response.status == 201
    assert response.headers["Content-Type"] == "application/json"
    assert response.json() == {"name": "Test Company"}
    assert response.body.endswith(b"\n")


def test_write_error_carries_message():
    response = write_error(404, "address not found")
    assert response.status == 404
    assert "address not found" in response.body.decode()
    assert response.json()["error"] == "address not found"


def test_request_json_decodes_body():
    assert Request(body=b'{"line_1": "123 Main St"}').json() == {"line_1": "123 Main St"}


def test_request_json_ignores_trailing_data():
    assert Request(body=b'{"limit": 5} extra').json() == {"limit": 5}


@pytest.mark.parametrize("body", [b'{"line_1": "bad json",', b"", b"   "])
def test_request_json_rejects_malformed(body):
    with pytest.raises(ValueError):
        Request(body=body).json()


def test_router_fills_path_values():
    response = _router().dispatch(Request(method="GET", path="/items/42"))
    assert response.status == 200
    assert response.json()["params"] == {"id": "42"}


def test_router_rejects_wrong_method():
    response = _router().dispatch(Request(method="DELETE", path="/items/42"))
    assert response.status == 405


def test_router_unknown_path():
    response = _router().dispatch(Request(method="GET", path="/nothing"))
    assert response.status == 404


def test_router_is_a_wsgi_app():
    status, headers, body = _call(_router(), _environ("POST", "/items", b"{}"))
    assert status.startswith("200")
    assert headers["Content-Type"] == "application/json"
    assert Response(body=body).json()["repo"] is None


def test_make_app_hands_repo_to_handlers():
    app = make_app(_router(), "repo-sentinel")
    status, headers, body = _call(app, _environ("GET", "/items/9", headers={"Origin": "http://localhost"}))
    assert status.startswith("200")
    assert Response(body=body).json() == {"params": {"id": "9"}, "repo": "repo-sentinel"}
    assert headers["Access-Control-Allow-Origin"] == "*"


def test_make_app_answers_preflight():
    app = make_app(_router(), None)
    environ = _environ(
        "OPTIONS", "/items/9",
        headers={
            "Origin": "http://localhost",
            "Access-Control-Request-Method": "PUT",
            "Access-Control-Request-Headers": "x-app-token",
        },
    )
    status, headers, _ = _call(app, environ)
    assert status.startswith("200")
    assert headers["Access-Control-Allow-Methods"] == "PUT"
    assert headers["Access-Control-Allow-Headers"] == "X-App-Token"


def test_make_app_rejects_disallowed_preflight_method():
    app = make_app(_router(), None)
    environ = _environ("OPTIONS", "/items/9", headers={"Access-Control-Request-Method": "PATCH"})
    status, _, _ = _call(app, environ)
    assert status.startswith("405")


def test_make_app_rejects_disallowed_preflight_header():
    app = make_app(_router(), None)
    environ = _environ(
        "OPTIONS", "/items/9",
        headers={"Access-Control-Request-Method": "GET", "Access-Control-Request-Headers": "X-Other"},
    )
    status, _, _ = _call(app, environ)
    assert status.startswith("403")