"""Vendor/product code to product family matching."""

from __future__ import annotations

from collections.abc import Mapping

from ibsparse.core.model import ProductFamily


def _vendor_match(vendor_code: int, family: ProductFamily) -> bool:
    return vendor_code in family.vendors


def match_score(vendor_code: int, product_code: int, family: ProductFamily) -> int:
    if product_code != family.product:
        return 0
    if _vendor_match(vendor_code, family):
        return 2
    if family.any_vendor:
        return 1
    return 0


def best_family_for_codes(
    vendor_code: int,
    product_code: int,
    families: Mapping[str, ProductFamily],
) -> ProductFamily | None:
    best: ProductFamily | None = None
    best_score = 0
    for family in families.values():
        score = match_score(vendor_code, product_code, family)
        if score > best_score:
            best = family
            best_score = score
    return best
