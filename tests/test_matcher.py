"""
Tests for matching recommended titles against the catalog.
"""

from storefront.entities import ProductRecommendation, RecommendedProduct
from storefront.recommendations.matcher import match_all, match_product, resolve

from .conftest import make_product


def recommendation(*titles_and_priorities):
    return ProductRecommendation(recommended_products=tuple(
        RecommendedProduct(product_title=title, priority=priority)
        for title, priority in titles_and_priorities
    ))


class TestMatchProduct:
    def test_exact_match_is_case_insensitive(self, catalog_products, car_wax):
        assert match_product("premium car wax", catalog_products) is car_wax

    def test_substring_of_catalog_title(self, catalog_products, car_wax):
        assert match_product("car wax", catalog_products) is car_wax

    def test_catalog_title_inside_recommended_title(self, catalog_products, tire_shine):
        assert match_product("Tire Shine 16oz bottle", catalog_products) is tire_shine

    def test_no_overlap(self, catalog_products):
        assert match_product("Glass Sealant", catalog_products) is None

    def test_exact_match_beats_earlier_substring(self):
        wax_kit = make_product("gid://shopify/Product/10", "Wax Kit Deluxe")
        wax = make_product("gid://shopify/Product/11", "Wax")
        assert match_product("wax", [wax_kit, wax]) is wax

    def test_first_substring_match_in_catalog_order(self):
        first = make_product("gid://shopify/Product/10", "Blue Wax")
        second = make_product("gid://shopify/Product/11", "Red Wax")
        assert match_product("wax", [first, second]) is first

    def test_empty_title_matches_nothing(self, catalog_products):
        assert match_product("", catalog_products) is None

    def test_empty_title_does_not_match_untitled_product(self, car_wax):
        untitled = make_product("gid://shopify/Product/12", "")
        assert match_product("", [untitled, car_wax]) is None
        assert match_product(None, [untitled]) is None

    def test_empty_catalog_title_is_skipped(self, car_wax):
        untitled = make_product("gid://shopify/Product/12", "")
        assert match_product("Premium Car Wax Spray", [untitled, car_wax]) is car_wax


class TestMatchAll:
    def test_keys_are_lowercased_and_unmatched_dropped(self, catalog_products, car_wax):
        matches = match_all(recommendation(("Premium Car Wax", 1), ("Glass Sealant", 2)), catalog_products)
        assert matches == {"premium car wax": car_wax}


class TestResolve:
    def test_sorted_by_priority_and_unmatched_kept(self, catalog_products, car_wax, tire_shine):
        resolved = resolve(
            recommendation(("Glass Sealant", 3), ("tire shine", 2), ("car wax", 1)),
            catalog_products,
        )

        assert [r.recommended.product_title for r in resolved] == ["car wax", "tire shine", "Glass Sealant"]
        assert resolved[0].product is car_wax
        assert resolved[1].product is tire_shine
        assert resolved[2].product is None
        assert resolved[2].available is False

    def test_to_dict(self, catalog_products):
        resolved = resolve(recommendation(("Glass Sealant", 2)), catalog_products)[0]
        assert resolved.to_dict() == {
            "product_title": "Glass Sealant",
            "priority": 2,
            "priority_label": "Recommended",
            "reason": "Recommended for your needs",
            "available": False,
            "product": None,
        }
