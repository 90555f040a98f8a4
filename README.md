# ordermgmt

A small JSON API for order management, served as a plain WSGI application.
It uses only the Python standard library and needs Python 3.10 or later.

## What it provides

- **Public lookups** (`ordermgmt.public`): `get_roles`, `get_commodity_types`
  and `get_order_statuses` return JSON lists of the values of `Role`,
  `CommodityType` (without `unknown`) and `OrderStatus`.
  `add_public_routes(router)` registers them as `GET /roles`,
  `GET /commodity-types` and `GET /order-statuses`.
- **Addresses** (`ordermgmt.addresses`): `create`, `find`, `get`, `update`.
- **Companies** (`ordermgmt.companies`): `create`, `delete`, `find`, `get`, `update`.
- **Commodity attributes** (`ordermgmt.commodity_attributes`): `create`,
  `find`, `get`, `update`.
- **Locations** (`ordermgmt.locations`): `create`, `delete`, `find`, `get`,
  `update`. Creating a location checks that its company and address exist.
  Changing a location's address checks that the new address exists. `get`
  fills in the location's `company` and `address`. If one of those lookups
  fails, that field is left out.

Every handler takes an `ordermgmt.web.Request` and returns an
`ordermgmt.web.Response`. Handlers that act on one record read its id from
`request.params["id"]`. The router fills that in from a `{id}` part of the
route path.

### Responses

| Status | When |
|--------|------|
| `201`  | A record was created. |
| `200`  | A read, find or update succeeded. |
| `204`  | A record was deleted. The response has an empty body. |
| `400`  | The body is not valid JSON, or a field has the wrong type. |
| `400`  | A payload fails validation. |
| `400`  | The path id is not a 64-bit integer. |
| `400`  | A location's company or address does not exist. |
| `400`  | A location name is already taken (`LocationNameExistsError`). |
| `404`  | The requested record does not exist. |
| `409`  | A company or commodity attribute name is already taken. |
| `500`  | Any other storage error. The error's text is the message. |

The `409` case applies when the storage error's text contains
`duplicate key value violates unique constraint`.

Error bodies have the form `{"error": "<message>"}`. A validation message
reads like this:

```
Key: 'CreateCompanyPayload.Name' Error:Field validation for 'Name' failed on the 'required' tag
```

For locations, validation messages start with `validation failed: `.

The `find` handlers read their filters and paging from the JSON request
body, for example `{"limit": 5, "offset": 5}`. When the body has no positive
`limit`, `10` is used. The response has the form
`{"data": [...], "total": <count>}`.

## The repository

The package has no storage of its own. The handlers reach storage through
`request.repo`. That object must have the methods `addresses()`,
`companies()`, `commodity_attributes()` and `locations()`, and each of them
returns a table object.

Each table object needs these methods:

- `get(id)`: returns the record, or `None` when there is none.
- `find(opts)`: returns a pair `(items, total)`.
- `update(record)`: stores the changed record.

The `create` method differs by table:

- For addresses, `create(address)` returns the stored address. The handler
  responds with that returned value.
- For the other tables, `create(record)` stores the record it is given. It
  may change that record in place, for example by setting its `id`. The
  handler responds with the record.

The companies and locations tables also need a `delete(id)` method.

To report a storage failure, raise an exception. For a duplicate location
name, raise `ordermgmt.models.LocationNameExistsError`.

## Wiring an application

```python
from ordermgmt import addresses, commodity_attributes, companies, locations, public
from ordermgmt.web import Router, make_app, run

router = Router()
public.add_public_routes(router)

router.add_route("/api/v1/addresses", addresses.create, ["POST"])
router.add_route("/api/v1/addresses/find", addresses.find, ["POST"])
router.add_route("/api/v1/addresses/{id}", addresses.get, ["GET"])
router.add_route("/api/v1/addresses/{id}", addresses.update, ["PUT"])

router.add_route("/api/v1/companies", companies.create, ["POST"])
router.add_route("/api/v1/companies/{id}", companies.delete, ["DELETE"])

router.add_route("/api/v1/commodity-attributes", commodity_attributes.create, ["POST"])
router.add_route("/api/v1/locations", locations.create, ["POST"])

app = make_app(router, repo)   # repo: your storage, as described above
run(app, "", 8080)
```

### Router

`Router.add_route(path, handler, methods)` registers a handler. A `{name}`
part of the path matches one path segment. A `{name:regex}` part matches the
given pattern instead.

`Router.dispatch(request)` runs the first route whose path and method both
match:

- If the path matches a route but the method does not, it returns `405`.
- If no path matches, it returns `404`.

A `Router` is also a WSGI callable on its own, but it does not attach a
repository to the request.

### make_app

`make_app(router, repo)` returns a WSGI callable. It attaches `repo` to
every request and adds `Access-Control-Allow-Origin: *` to the responses.

It also answers CORS preflight `OPTIONS` requests:

- Allowed methods: `GET`, `POST`, `PUT`, `DELETE`, `OPTIONS` and `HEAD`.
- Allowed headers: the simple headers, plus `X-Requested-With`,
  `Content-Type`, `Authorization` and `X-App-Token`.
- An `OPTIONS` request without `Access-Control-Request-Method` gets `400`.

### run

`run(app, host="", port=8080, logger=None)` serves the application with the
standard library's WSGI server. It logs each request through `logging`, and
through the given logger when there is one. On `SIGINT` or `SIGTERM` it
shuts down cleanly.

### Helpers

`ordermgmt.web` also provides these helpers for writing handlers of your own:

- `json_response(status, value)`
- `write_error(status, message)`
- `parse_id(raw, message)`

## Models

`ordermgmt.models` contains:

- **Records:** `Address`, `Company`, `Location`, `CommodityAttribute` and
  `FindResult`.
- **Enumerations:** `Role`, `CommodityType` and `OrderStatus`.
- **Find options:** `AddressFindOpts`, `CompanyFindOpts`,
  `CommodityAttributeFindOpts` and `LocationFindOpts`.
- **Create and update payloads** for each record.
- **Functions:** `validate(payload)` raises `ValidationError`, and
  `to_json(value)` encodes any of these types as JSON text.
- **Errors:** `LocationNameExistsError`.

Every record, option and payload class has a `from_json(data)` classmethod
that builds it from decoded JSON.

## What it does not do

- There is no storage layer. You supply the repository.
- There is no login endpoint and no authentication or authorisation check.
  `Request.user_id` exists, but no handler reads it.
- There are no delete handlers for addresses or commodity attributes.
- There is no API documentation endpoint.
- There is no command-line program. You start the server from Python with
  `run`.