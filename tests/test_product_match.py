from ibsparse.core.model import LiteralModel, ProductDefinition, ProductFamily
from ibsparse.core.product_match import best_family_for_codes, match_score


def _family(family_id: str, product: int, vendors: tuple[int, ...]) -> ProductFamily:
    return ProductFamily(
        id=family_id,
        name=family_id,
        vendors=vendors,
        product=product,
        layout=ProductDefinition(model=LiteralModel(family_id), fields=()),
    )


def test_match_score_prefers_exact_vendor() -> None:
    assert match_score(0x000D, 0xBC81, _family("exact", 0xBC81, (0x000D,))) == 2
    assert match_score(0x000D, 0xBC81, _family("any", 0xBC81, ())) == 1


def test_best_family_prefers_exact_vendor_over_wildcard() -> None:
    exact = _family("exact", 0xBC81, (0x000D,))
    wildcard = _family("any", 0xBC81, ())

    picked = best_family_for_codes(0x000D, 0xBC81, {"any": wildcard, "exact": exact})
    assert picked is not None
    assert picked.id == "exact"

    fallback = best_family_for_codes(0x0059, 0xBC81, {"any": wildcard, "exact": exact})
    assert fallback is not None
    assert fallback.id == "any"


def test_no_match_returns_none() -> None:
    family = _family("p1", 0xBC83, (0x000D,))
    assert best_family_for_codes(0x0059, 0xBC83, {"p1": family}) is None
    assert best_family_for_codes(0x000D, 0xBC84, {"p1": family}) is None
