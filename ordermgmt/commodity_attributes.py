"""Commodity attribute endpoints."""

from http import HTTPStatus

from .companies import _body, _endpoint, _fetch, _find, _path_id, _storage
from .models import (
    CommodityAttribute,
    CommodityAttributeFindOpts,
    CreateCommodityAttributePayload,
    UpdateCommodityAttributePayload,
)
from .web import json_response

_CONFLICT_MESSAGE = "Commodity attribute with this name already exists"
_INVALID_ID = "invalid commodity attribute ID"
_NOT_FOUND = "commodity attribute not found"


@_endpoint
def create(request):
    """Create a commodity attribute from the request body."""
    payload = _body(request, CreateCommodityAttributePayload)
    attribute = CommodityAttribute(
        name=payload.name, commodity_type=payload.commodity_type
    )
    with _storage(conflict=_CONFLICT_MESSAGE):
        request.repo.commodity_attributes().create(attribute)
    return json_response(HTTPStatus.CREATED, attribute)


@_endpoint
def find(request):
    """Find commodity attributes using the options in the request body."""
    return _find(
        request, request.repo.commodity_attributes(), CommodityAttributeFindOpts
    )


@_endpoint
def get(request):
    """Return one commodity attribute by the ``id`` path value."""
    attribute_id = _path_id(request, _INVALID_ID)
    attribute = _fetch(request.repo.commodity_attributes(), attribute_id, _NOT_FOUND)
    return json_response(HTTPStatus.OK, attribute)


@_endpoint
def update(request):
    """Replace the name and commodity type of an existing attribute."""
    attribute_id = _path_id(request, _INVALID_ID)
    payload = _body(request, UpdateCommodityAttributePayload)
    attributes = request.repo.commodity_attributes()
    attribute = _fetch(attributes, attribute_id, _NOT_FOUND)
    attribute.name = payload.name
    attribute.commodity_type = payload.commodity_type
    with _storage(conflict=_CONFLICT_MESSAGE):
        attributes.update(attribute)
    return json_response(HTTPStatus.OK, attribute)