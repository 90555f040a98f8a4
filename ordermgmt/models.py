"""Domain types, request payloads and their validation."""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields, is_dataclass
from enum import Enum
from typing import Any, Callable, Optional

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


class Role(str, Enum):
    """A user role."""

    ADMIN = "admin"
    USER = "user"


class CommodityType(str, Enum):
    """The kind of commodity an attribute applies to."""

    UNKNOWN = "unknown"
    PRODUCE = "produce"


class OrderStatus(str, Enum):
    """Every state an order can be in."""

    PENDING_ACCEPTANCE = "pending_acceptance"
    PENDING_BOOKING = "pending_booking"
    HOLD = "hold"
    BOOKED = "booked"
    SHIPPED_IN_TRANSIT = "shipped_in_transit"
    DELIVERED = "delivered"
    READY_TO_INVOICE = "ready_to_invoice"
    INVOICED = "invoiced"
    REJECTED = "rejected"
    CANCELLED = "cancelled"
    HOLD_FOR_POD = "hold_for_pod"
    ORDER_TEMPLATE = "order_template"
    PAID_IN_FULL = "paid_in_full"


class ValidationError(ValueError):
    """A payload broke one or more of its field rules."""

    def __init__(self, problems):
        self.problems = list(problems)
        super().__init__("\n".join(self.problems))


class LocationNameExistsError(Exception):
    """A company already has a location with the requested name."""

    def __init__(self, message="location name already exists for this company"):
        super().__init__(message)


# --- decoding helpers -------------------------------------------------------

def _as_str(value):
    if not isinstance(value, str):
        raise ValueError(f"expected a string, got {type(value).__name__}")
    return value


def _as_int(value):
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"expected an integer, got {type(value).__name__}")
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise ValueError(f"integer {value} out of range")
    return value


def _as_array(value):
    if not isinstance(value, list):
        raise ValueError(f"expected an array, got {type(value).__name__}")
    return list(value)


def _list_of(convert: Callable[[Any], Any]) -> Callable[[Any], list]:
    return lambda value: [convert(item) for item in _as_array(value)]


def _as_commodity_type(value):
    text = _as_str(value)
    try:
        return CommodityType(text)
    except ValueError:
        raise ValueError(f"unknown commodity type {text!r}") from None


def _nested(cls) -> Callable[[Any], Any]:
    return lambda value: cls.from_json(value)


def _field(json_name, decode, *, default=None, factory=None, key=None,
           rules=(), omitempty=False):
    metadata = {
        "json": json_name,
        "decode": decode,
        "key": key,
        "rules": tuple(rules),
        "omitempty": omitempty,
    }
    if factory is not None:
        return field(default_factory=factory, metadata=metadata)
    return field(default=default, metadata=metadata)


def _int(json_name, **options):
    return _field(json_name, _as_int, default=0, **options)


def _str(json_name, **options):
    return _field(json_name, _as_str, default="", **options)


def _ints(json_name):
    return _field(json_name, _list_of(_as_int), factory=list)


def _strs(json_name):
    return _field(json_name, _list_of(_as_str), factory=list)


def _commodity(json_name, **options):
    return _field(json_name, _as_commodity_type, default=CommodityType.UNKNOWN, **options)


class _JSONObject:
    @classmethod
    def from_json(cls, data):
        """Build an instance from decoded JSON, as a typed decoder would."""
        if not isinstance(data, dict):
            raise ValueError(
                f"cannot decode {type(data).__name__} into {cls.__name__}"
            )
        folded = {str(k).casefold(): v for k, v in data.items()}
        values = {}
        for f in fields(cls):
            name = f.metadata["json"]
            if name in data:
                raw = data[name]
            elif name.casefold() in folded:
                raw = folded[name.casefold()]
            else:
                continue
            if raw is None:
                continue
            values[f.name] = f.metadata["decode"](raw)
        return cls(**values)


# --- entities ---------------------------------------------------------------

@dataclass
class Address(_JSONObject):
    id: int = _int("id")
    line_1: str = _str("line_1")
    line_2: str = _str("line_2")
    city: str = _str("city")
    state: str = _str("state")
    postal_code: str = _str("postal_code")


@dataclass
class Company(_JSONObject):
    id: int = _int("id")
    name: str = _str("name")
    address_id: int = _int("address_id")


@dataclass
class Location(_JSONObject):
    id: int = _int("id")
    company_id: int = _int("company_id")
    address_id: int = _int("address_id")
    name: str = _str("name")
    company: Optional[Company] = _field("company", _nested(Company), omitempty=True)
    address: Optional[Address] = _field("address", _nested(Address), omitempty=True)


@dataclass
class CommodityAttribute(_JSONObject):
    id: int = _int("id")
    name: str = _str("name")
    commodity_type: CommodityType = _commodity("commodityType")


@dataclass
class FindResult(_JSONObject):
    data: list = _field("data", _as_array, factory=list)
    total: int = _int("total")


# --- find options -----------------------------------------------------------

@dataclass
class _PagedByIds(_JSONObject):
    ids: list = _ints("ids")
    limit: int = _int("limit")
    offset: int = _int("offset")


@dataclass
class _PagedByIdsAndNames(_PagedByIds):
    names: list = _strs("names")


class AddressFindOpts(_PagedByIds):
    """Filters and paging for an address search."""


class CompanyFindOpts(_PagedByIdsAndNames):
    """Filters and paging for a company search."""


class CommodityAttributeFindOpts(_PagedByIdsAndNames):
    """Filters and paging for a commodity attribute search."""


@dataclass
class LocationFindOpts(_PagedByIdsAndNames):
    """Filters and paging for a location search."""

    company_ids: list = _ints("company_ids")


# --- payloads ---------------------------------------------------------------

_REQUIRED = ("required",)
_NAME_RULES = ("required", "min=2", "max=255")


@dataclass
class _AddressFields(_JSONObject):
    line_1: str = _str("line_1", key="Line1", rules=_REQUIRED)
    line_2: Optional[str] = _field("line_2", _as_str, key="Line2")
    city: str = _str("city", key="City", rules=_REQUIRED)
    state: str = _str("state", key="State", rules=_REQUIRED)
    postal_code: str = _str("postal_code", key="PostalCode", rules=_REQUIRED)


class CreateAddressPayload(_AddressFields):
    """Body of a request that creates an address."""


class UpdateAddressPayload(_AddressFields):
    """Body of a request that replaces an address."""


@dataclass
class _CompanyFields(_JSONObject):
    name: str = _str("name", key="Name", rules=_REQUIRED)
    address_id: int = _int("address_id", key="AddressID", rules=_REQUIRED)


class CreateCompanyPayload(_CompanyFields):
    """Body of a request that creates a company."""


class UpdateCompanyPayload(_CompanyFields):
    """Body of a request that replaces a company."""


@dataclass
class CreateLocationPayload(_JSONObject):
    company_id: int = _int("company_id", key="CompanyID", rules=_REQUIRED)
    address_id: int = _int("address_id", key="AddressID", rules=_REQUIRED)
    name: str = _str("name", key="Name", rules=_REQUIRED)


@dataclass
class UpdateLocationPayload(_JSONObject):
    address_id: int = _int("address_id", key="AddressID", rules=_REQUIRED)
    name: str = _str("name", key="Name", rules=_REQUIRED)


@dataclass
class _CommodityAttributeFields(_JSONObject):
    name: str = _str("name", key="Name", rules=_NAME_RULES)
    commodity_type: CommodityType = _commodity(
        "commodityType", key="CommodityType", rules=_REQUIRED
    )


class CreateCommodityAttributePayload(_CommodityAttributeFields):
    """Body of a request that creates a commodity attribute."""


class UpdateCommodityAttributePayload(_CommodityAttributeFields):
    """Body of a request that replaces a commodity attribute."""


# --- validation and encoding ------------------------------------------------

def _is_zero(value):
    if value is None or value is CommodityType.UNKNOWN:
        return True
    if isinstance(value, (str, list, dict)):
        return len(value) == 0
    return value == 0


def _size(value):
    if isinstance(value, (str, list, dict)):
        return len(value)
    return value


def _passes(tag, param, value):
    if tag == "required":
        return not _is_zero(value)
    if value is None:
        return True
    if tag == "min":
        return _size(value) >= int(param)
    if tag == "max":
        return _size(value) <= int(param)
    raise ValueError(f"unknown validation tag {tag!r}")


def validate(payload):
    """Check a payload's field rules; return it, or raise ValidationError."""
    type_name = type(payload).__name__
    problems = []
    for f in fields(payload):
        key = f.metadata.get("key") or f.name
        value = getattr(payload, f.name)
        for rule in f.metadata.get("rules", ()):
            tag, _, param = rule.partition("=")
            if not _passes(tag, param, value):
                problems.append(
                    f"Key: '{type_name}.{key}' Error:Field validation for "
                    f"'{key}' failed on the '{tag}' tag"
                )
                break
    if problems:
        raise ValidationError(problems)
    return payload


def _plain(value):
    if isinstance(value, Enum):
        return value.value
    if is_dataclass(value) and not isinstance(value, type):
        result = {}
        for f in fields(value):
            item = getattr(value, f.name)
            if f.metadata.get("omitempty") and item is None:
                continue
            result[f.metadata.get("json", f.name)] = _plain(item)
        return result
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    if isinstance(value, dict):
        return {str(k): _plain(v) for k, v in value.items()}
    return value


def to_json(value):
    """Encode a value, including the dataclasses above, as JSON text."""
    return json.dumps(_plain(value))