import pytest

from ordermgmt.public import add_public_routes
from ordermgmt.web import Request, Router

EXPECTED = {
    "/roles": ["admin", "user"],
    "/commodity-types": ["produce"],
    "/order-statuses": [
        "pending_acceptance",
        "pending_booking",
        "hold",
        "booked",
        "shipped_in_transit",
        "delivered",
        "ready_to_invoice",
        "invoiced",
        "rejected",
        "cancelled",
        "hold_for_pod",
        "order_template",
        "paid_in_full",
    ],
}


@pytest.fixture
def router():
    router = Router()
    add_public_routes(router)
    return router


@pytest.mark.parametrize("path, expected", list(EXPECTED.items()))
def test_lists(router, path, expected):
    response = router.dispatch(Request(method="GET", path=path))
    assert response.status == 200
    assert response.headers["Content-Type"] == "application/json"
    assert sorted(response.json()) == sorted(expected)


@pytest.mark.parametrize("path", list(EXPECTED))
@pytest.mark.parametrize("method", ["POST", "PUT", "DELETE"])
def test_unsupported_methods(router, method, path):
    assert router.dispatch(Request(method=method, path=path)).status == 405