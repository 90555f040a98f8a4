"""Address endpoints."""

from contextlib import contextmanager
from functools import wraps
from http import HTTPStatus

from .models import (
    Address,
    AddressFindOpts,
    CreateAddressPayload,
    FindResult,
    UpdateAddressPayload,
    ValidationError,
    validate,
)
from .web import json_response, parse_id, write_error

_DEFAULT_LIMIT = 10


class _Abort(Exception):
    """Ends a request early with an error response."""

    def __init__(self, status, message):
        super().__init__(message)
        self.status = status


def _endpoint(handler):
    @wraps(handler)
    def respond(request):
        try:
            return handler(request)
        except _Abort as exc:
            return write_error(exc.status, str(exc))

    return respond


def _path_id(request):
    try:
        return parse_id(request.params.get("id"), "invalid address ID")
    except ValueError as exc:
        raise _Abort(HTTPStatus.BAD_REQUEST, str(exc)) from None


def _body(request, cls, *, checked=True):
    try:
        data = request.json()
        payload = cls() if data is None else cls.from_json(data)
    except ValueError:
        raise _Abort(HTTPStatus.BAD_REQUEST, "invalid request body") from None
    if checked:
        try:
            validate(payload)
        except ValidationError as exc:
            raise _Abort(HTTPStatus.BAD_REQUEST, str(exc)) from None
    return payload


@contextmanager
def _storage():
    try:
        yield
    except Exception as exc:
        raise _Abort(HTTPStatus.INTERNAL_SERVER_ERROR, str(exc)) from exc


def _existing(addresses, address_id):
    with _storage():
        address = addresses.get(address_id)
    if address is None:
        raise _Abort(HTTPStatus.NOT_FOUND, "address not found")
    return address


def _apply(address, payload):
    address.line_1 = payload.line_1
    address.line_2 = payload.line_2 if payload.line_2 is not None else ""
    address.city = payload.city
    address.state = payload.state
    address.postal_code = payload.postal_code
    return address


@_endpoint
def create(request):
    """Create an address from the request body."""
    payload = _body(request, CreateAddressPayload)
    with _storage():
        created = request.repo.addresses().create(_apply(Address(), payload))
    return json_response(HTTPStatus.CREATED, created)


@_endpoint
def find(request):
    """Find addresses using the options in the request body."""
    opts = _body(request, AddressFindOpts, checked=False)
    if opts.limit <= 0:
        opts.limit = _DEFAULT_LIMIT
    with _storage():
        items, total = request.repo.addresses().find(opts)
    return json_response(HTTPStatus.OK, FindResult(data=list(items or []), total=total))


@_endpoint
def get(request):
    """Return one address by the ``id`` path value."""
    address_id = _path_id(request)
    return json_response(HTTPStatus.OK, _existing(request.repo.addresses(), address_id))


@_endpoint
def update(request):
    """Replace the fields of an existing address."""
    address_id = _path_id(request)
    payload = _body(request, UpdateAddressPayload)
    addresses = request.repo.addresses()
    address = _apply(_existing(addresses, address_id), payload)
    with _storage():
        addresses.update(address)
    return json_response(HTTPStatus.OK, address)