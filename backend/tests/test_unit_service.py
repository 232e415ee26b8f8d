# Overview: Pytest coverage for kilogram normalization of line items.

import pytest

from salesops.models import OrderItem
from salesops.services.unit_service import (
    DEFAULT_BAG_WEIGHT_KG,
    bag_weight_kg,
    normalize_to_kg,
    order_kg,
)


class TestNormalizeToKg:
    def test_conversion_table(self):
        assert normalize_to_kg(2, "Bags", "25kg Bags") == 50
        assert normalize_to_kg(1, "Quintal", "") == 100
        assert normalize_to_kg(1, "Ton", "") == 1000
        assert normalize_to_kg(3, "Bags", "Loose") == 150

    def test_kg_is_unchanged(self):
        assert normalize_to_kg(12.5, "KG") == 12.5

    def test_unit_match_ignores_case_and_whitespace(self):
        assert normalize_to_kg(2, " quintal ") == 200
        assert normalize_to_kg(1, "TON") == 1000
        assert normalize_to_kg(4, "bags", "10 KG bag") == 40

    def test_unknown_unit_is_treated_as_kg(self):
        """Irregular units still count instead of being dropped."""
        assert normalize_to_kg(7, "Crate") == 7
        assert normalize_to_kg(7, None) == 7

    def test_missing_quantity_is_zero(self):
        assert normalize_to_kg(None, "Quintal") == 0


class TestBagWeight:
    @pytest.mark.parametrize("packaging, expected", [
        ("5kg Pouch", 5),
        ("5 kg", 5),
        ("10kg Bags", 10),
        ("25kg Bags", 25),
        ("25 KG bags", 25),
        ("40kg", 40),
        ("50kg Jute", 50),
    ])
    def test_rule_table(self, packaging, expected):
        assert bag_weight_kg(packaging) == expected

    def test_longer_number_does_not_match_shorter_rule(self):
        """"25kg" and "15kg" must not be read as 5 kg bags."""
        assert bag_weight_kg("25kg") == 25
        assert bag_weight_kg("15kg") == 15

    def test_generic_number_extraction(self):
        assert bag_weight_kg("30kg sack") == 30
        assert bag_weight_kg("12.5 kg") == 12.5

    def test_zero_weight_falls_back_to_default(self):
        assert bag_weight_kg("0kg") == DEFAULT_BAG_WEIGHT_KG

    def test_missing_packaging_defaults_to_50(self):
        assert bag_weight_kg(None) == 50
        assert bag_weight_kg("") == 50
        assert bag_weight_kg("Standard") == 50


class TestOrderKg:
    def test_each_line_is_converted_before_summing(self):
        items = [
            OrderItem(product_name="Atta", quantity=2, unit="Bags", packaging="25kg Bags"),
            OrderItem(product_name="Atta", quantity=1, unit="Quintal"),
            OrderItem(product_name="Maida", quantity=0.5, unit="Ton"),
            OrderItem(product_name="Suji", quantity=3.333, unit="KG"),
        ]
        assert order_kg(items) == 653.33

    def test_empty_order_has_no_kg(self):
        assert order_kg([]) == 0
