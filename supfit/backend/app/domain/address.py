# app/domain/address.py
from __future__ import annotations

from typing import Any

from .parsing import get_first, get_nested
from .types import StructuredAddress


def address_from_payload(payload: dict[str, Any] | None) -> StructuredAddress | None:
    """
    Take a loosely-shaped address form payload and produce a StructuredAddress:
      line1, city, state, postal, country

    Supports the profile form keys (line1/postal) plus common
    addressLine/zipCode/postalCode variants and a nested "address" dict.
    Returns None when nothing address-like is present; completeness is
    checked separately via StructuredAddress.is_complete().
    """
    if not payload:
        return None

    line1 = get_first(payload, "line1", "addressLine", "address_line", "street")
    if not line1:
        line1 = get_nested(payload, "address.line1") or get_nested(payload, "address.addressLine")

    city = get_first(payload, "city") or get_nested(payload, "address.city")

    state = get_first(payload, "state", "stateCode", "province")
    if not state:
        state = get_nested(payload, "address.state") or get_nested(payload, "address.stateCode")

    postal = get_first(payload, "postal", "postalCode", "zipCode", "zipcode", "pincode")
    if not postal:
        postal = (
            get_nested(payload, "address.postal")
            or get_nested(payload, "address.postalCode")
            or get_nested(payload, "address.zipCode")
        )

    country = get_first(payload, "country") or get_nested(payload, "address.country")

    if not any((line1, city, state, postal)):
        return None

    def _s(v: Any) -> str:
        return "" if v is None else str(v).strip()

    return StructuredAddress(
        line1=_s(line1),
        city=_s(city),
        state=_s(state),
        postal=_s(postal),
        country=_s(country) or None,
    )


def region_key(name: str | None) -> str | None:
    """'  New   Delhi ' -> 'new delhi'; used to look up city centroids."""
    if not name:
        return None
    s = " ".join(str(name).split()).lower()
    return s or None
