"""Company endpoints, and the request plumbing the resource endpoints share."""

from contextlib import contextmanager
from functools import wraps
from http import HTTPStatus

from .models import (
    Company,
    CompanyFindOpts,
    CreateCompanyPayload,
    FindResult,
    UpdateCompanyPayload,
    ValidationError,
    validate,
)
from .web import Response, json_response, parse_id, write_error

_DEFAULT_LIMIT = 10
_DUPLICATE = "duplicate key value violates unique constraint"
_CONFLICT_MESSAGE = "Company with this name already exists"
_INVALID_ID = "invalid company ID"
_NOT_FOUND = "company not found"


class _Abort(Exception):
    """Ends a request early with an error response."""

    def __init__(self, status, message):
        super().__init__(message)
        self.status = status


def _endpoint(handler):
    """Turn an ``_Abort`` raised by ``handler`` into an error response."""

    @wraps(handler)
    def respond(request):
        try:
            return handler(request)
        except _Abort as exc:
            return write_error(exc.status, str(exc))

    return respond


def _path_id(request, message):
    try:
        return parse_id(request.params.get("id"), message)
    except ValueError as exc:
        raise _Abort(HTTPStatus.BAD_REQUEST, str(exc)) from None


def _body(request, cls, *, checked=True, prefix=""):
    """Decode the request body into ``cls`` and, if asked, validate it."""
    try:
        data = request.json()
        payload = cls() if data is None else cls.from_json(data)
    except ValueError:
        raise _Abort(HTTPStatus.BAD_REQUEST, "invalid request body") from None
    if checked:
        try:
            validate(payload)
        except ValidationError as exc:
            raise _Abort(HTTPStatus.BAD_REQUEST, prefix + str(exc)) from None
    return payload


@contextmanager
def _storage(conflict=None, rejected=()):
    """Map repository failures to error responses.

    ``rejected`` exceptions become 400 responses with their own message;
    a duplicate-key failure becomes 409 with ``conflict`` when it is given;
    anything else becomes 500.
    """
    try:
        yield
    except _Abort:
        raise
    except rejected as exc:
        raise _Abort(HTTPStatus.BAD_REQUEST, str(exc)) from exc
    except Exception as exc:
        if conflict is not None and _DUPLICATE in str(exc):
            raise _Abort(HTTPStatus.CONFLICT, conflict) from exc
        raise _Abort(HTTPStatus.INTERNAL_SERVER_ERROR, str(exc)) from exc


def _fetch(table, item_id, message, status=HTTPStatus.NOT_FOUND):
    """Return the stored item, or abort with ``status`` when it is missing."""
    with _storage():
        item = table.get(item_id)
    if item is None:
        raise _Abort(status, message)
    return item


def _find(request, table, opts_cls):
    """Run a paged search with the options in the request body."""
    opts = _body(request, opts_cls, checked=False)
    if opts.limit <= 0:
        opts.limit = _DEFAULT_LIMIT
    with _storage():
        items, total = table.find(opts)
    return json_response(HTTPStatus.OK, FindResult(data=list(items or []), total=total))


@_endpoint
def create(request):
    """Create a company from the request body."""
    payload = _body(request, CreateCompanyPayload)
    company = Company(name=payload.name, address_id=payload.address_id)
    with _storage(conflict=_CONFLICT_MESSAGE):
        request.repo.companies().create(company)
    return json_response(HTTPStatus.CREATED, company)


@_endpoint
def delete(request):
    """Delete the company named by the ``id`` path value."""
    company_id = _path_id(request, _INVALID_ID)
    with _storage():
        request.repo.companies().delete(company_id)
    return Response(int(HTTPStatus.NO_CONTENT))


@_endpoint
def find(request):
    """Find companies using the options in the request body."""
    return _find(request, request.repo.companies(), CompanyFindOpts)


@_endpoint
def get(request):
    """Return one company by the ``id`` path value."""
    company_id = _path_id(request, _INVALID_ID)
    return json_response(
        HTTPStatus.OK, _fetch(request.repo.companies(), company_id, _NOT_FOUND)
    )


@_endpoint
def update(request):
    """Replace the name and address of an existing company."""
    company_id = _path_id(request, _INVALID_ID)
    payload = _body(request, UpdateCompanyPayload)
    companies = request.repo.companies()
    company = _fetch(companies, company_id, _NOT_FOUND)
    company.name = payload.name
    company.address_id = payload.address_id
    with _storage():
        companies.update(company)
    return json_response(HTTPStatus.OK, company)