import json
from unittest.mock import Mock

import pytest

from ordermgmt import addresses
from ordermgmt.models import Address, AddressFindOpts, to_json
from ordermgmt.web import Request

CREATE_BODY = {
    "line_1": "123 Main St",
    "city": "Anytown",
    "state": "CA",
    "postal_code": "12345",
}
UPDATE_BODY = {
    "line_1": "456 Updated Ave",
    "city": "Newville",
    "state": "NY",
    "postal_code": "54321",
}


@pytest.fixture
def store():
    return Mock()


@pytest.fixture
def repo(store):
    return Mock(**{"addresses.return_value": store})


def call(handler, repo, body=b"", address_id=None, **changes):
    if isinstance(body, dict):
        body = json.dumps({**body, **changes}).encode()
    params = {} if address_id is None else {"id": address_id}
    return handler(
        Request(method="POST", path="/api/v1/addresses", body=body, params=params, repo=repo)
    )


def test_create_success(repo, store):
    store.create.return_value = Address(
        id=1, line_1="123 Main St", city="Anytown", state="CA", postal_code="12345"
    )
    resp = call(addresses.create, repo, CREATE_BODY)
    assert resp.status == 201
    assert resp.json()["id"] == 1
    assert resp.json()["line_1"] == "123 Main St"
    sent = store.create.call_args.args[0]
    assert (sent.line_2, sent.postal_code) == ("", "12345")


def test_create_keeps_line_2(repo, store):
    store.create.side_effect = lambda address: address
    resp = call(addresses.create, repo, CREATE_BODY, line_2="Apt 4B")
    assert resp.status == 201
    assert resp.json()["line_2"] == "Apt 4B"


@pytest.mark.parametrize("handler", [addresses.create, addresses.find])
def test_malformed_body(repo, handler):
    resp = call(handler, repo, b'{"line_1": "bad json",')
    assert resp.status == 400
    assert "invalid request body" in resp.body.decode()


def test_create_missing_line_1(repo, store):
    body = {key: value for key, value in CREATE_BODY.items() if key != "line_1"}
    resp = call(addresses.create, repo, body)
    assert resp.status == 400
    assert "CreateAddressPayload.Line1" in resp.body.decode()
    store.create.assert_not_called()


@pytest.mark.parametrize(
    "body, expected_opts, found",
    [
        (
            b"{}",
            AddressFindOpts(limit=10, offset=0),
            [Address(id=1, line_1="123 A St"), Address(id=2, line_1="456 B St")],
        ),
        (
            to_json(AddressFindOpts(limit=5, offset=5)).encode(),
            AddressFindOpts(limit=5, offset=5),
            [Address(id=3, line_1="789 C St")],
        ),
        (b"{}", AddressFindOpts(limit=10, offset=0), []),
    ],
)
def test_find(repo, store, body, expected_opts, found):
    store.find.return_value = (found, len(found))
    resp = call(addresses.find, repo, body)
    assert resp.status == 200
    store.find.assert_called_once_with(expected_opts)
    result = resp.json()
    assert result["total"] == len(found)
    assert [item["line_1"] for item in result["data"]] == [a.line_1 for a in found]


def test_get_found(repo, store):
    store.get.return_value = Address(id=123, line_1="123 Found St")
    resp = call(addresses.get, repo, address_id="123")
    assert resp.status == 200
    store.get.assert_called_once_with(123)
    assert resp.json()["id"] == 123
    assert resp.json()["line_1"] == "123 Found St"


@pytest.mark.parametrize("handler", [addresses.get, addresses.update])
@pytest.mark.parametrize(
    "address_id, status, message",
    [("404", 404, "address not found"), ("abc", 400, "invalid address ID")],
)
def test_lookup_failures(repo, store, handler, address_id, status, message):
    store.get.return_value = None
    resp = call(handler, repo, UPDATE_BODY, address_id)
    assert resp.status == status
    assert message in resp.body.decode()


@pytest.mark.parametrize(
    "handler, method, message",
    [
        (addresses.create, "create", "unexpected database error"),
        (addresses.find, "find", "find query failed"),
        (addresses.get, "get", "database connection lost"),
        (addresses.update, "get", "get error"),
    ],
)
def test_repository_errors(repo, store, handler, method, message):
    getattr(store, method).side_effect = RuntimeError(message)
    resp = call(handler, repo, CREATE_BODY, "500")
    assert resp.status == 500
    assert message in resp.body.decode()


def test_update_success(repo, store):
    store.get.return_value = Address(id=123, line_1="Old St", line_2="Unit 1")
    store.update.return_value = None
    resp = call(addresses.update, repo, UPDATE_BODY, "123")
    assert resp.status == 200
    store.get.assert_called_once_with(123)
    data = resp.json()
    assert (data["id"], data["line_1"], data["line_2"]) == (123, "456 Updated Ave", "")


def test_update_missing_field(repo, store):
    body = {key: value for key, value in UPDATE_BODY.items() if key != "city"}
    resp = call(addresses.update, repo, body, "123")
    assert resp.status == 400
    store.get.assert_not_called()


def test_update_update_error(repo, store):
    store.get.return_value = Address(id=123)
    store.update.side_effect = RuntimeError("update error")
    resp = call(addresses.update, repo, UPDATE_BODY, "123")
    assert resp.status == 500
    assert "update error" in resp.body.decode()