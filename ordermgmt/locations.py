"""Location endpoints."""

from contextlib import suppress
from http import HTTPStatus

from .companies import _body, _endpoint, _fetch, _find, _path_id, _storage
from .models import (
    CreateLocationPayload,
    Location,
    LocationFindOpts,
    LocationNameExistsError,
    UpdateLocationPayload,
)
from .web import Response, json_response

_INVALID_ID = "invalid location ID"
_NOT_FOUND = "location not found"
_VALIDATION_PREFIX = "validation failed: "


def _related(table, item_id):
    """Look up a related item; a failed lookup leaves it out."""
    with suppress(Exception):
        return table.get(item_id)
    return None


@_endpoint
def create(request):
    """Create a location for an existing company at an existing address."""
    payload = _body(request, CreateLocationPayload, prefix=_VALIDATION_PREFIX)
    repo = request.repo
    _fetch(repo.companies(), payload.company_id, "company not found", HTTPStatus.BAD_REQUEST)
    _fetch(repo.addresses(), payload.address_id, "address not found", HTTPStatus.BAD_REQUEST)
    location = Location(
        company_id=payload.company_id,
        address_id=payload.address_id,
        name=payload.name,
    )
    with _storage(rejected=(LocationNameExistsError,)):
        repo.locations().create(location)
    return json_response(HTTPStatus.CREATED, location)


@_endpoint
def delete(request):
    """Delete the location named by the ``id`` path value."""
    location_id = _path_id(request, _INVALID_ID)
    with _storage():
        request.repo.locations().delete(location_id)
    return Response(int(HTTPStatus.NO_CONTENT))


@_endpoint
def find(request):
    """Find locations using the options in the request body."""
    return _find(request, request.repo.locations(), LocationFindOpts)


@_endpoint
def get(request):
    """Return one location, with its company and address filled in."""
    location_id = _path_id(request, _INVALID_ID)
    repo = request.repo
    location = _fetch(repo.locations(), location_id, _NOT_FOUND)
    location.company = _related(repo.companies(), location.company_id)
    location.address = _related(repo.addresses(), location.address_id)
    return json_response(HTTPStatus.OK, location)


@_endpoint
def update(request):
    """Change the name and address of an existing location."""
    location_id = _path_id(request, _INVALID_ID)
    payload = _body(request, UpdateLocationPayload, prefix=_VALIDATION_PREFIX)
    repo = request.repo
    locations = repo.locations()
    location = _fetch(locations, location_id, _NOT_FOUND)
    _fetch(
        repo.addresses(), payload.address_id, "new address not found", HTTPStatus.BAD_REQUEST
    )
    location.name = payload.name
    location.address_id = payload.address_id
    with _storage(rejected=(LocationNameExistsError,)):
        locations.update(location)
    return json_response(HTTPStatus.OK, location)