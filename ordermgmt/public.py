"""Routes that need no authentication."""

from http import HTTPStatus

from .models import CommodityType, OrderStatus, Role
from .web import json_response


def get_roles(request):
    """List every user role."""
    return json_response(HTTPStatus.OK, [role.value for role in Role])


def get_commodity_types(request):
    """List every commodity type."""
    return json_response(
        HTTPStatus.OK,
        [ct.value for ct in CommodityType if ct is not CommodityType.UNKNOWN],
    )


def get_order_statuses(request):
    """List every order status."""
    return json_response(HTTPStatus.OK, [status.value for status in OrderStatus])


def add_public_routes(router):
    """Register the public routes on ``router``."""
    router.add_route("/roles", get_roles, ["GET"])
    router.add_route("/commodity-types", get_commodity_types, ["GET"])
    router.add_route("/order-statuses", get_order_statuses, ["GET"])