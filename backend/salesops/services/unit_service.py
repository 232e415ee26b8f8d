# Overview: Quantity normalization; converts line-item quantities to kilograms.

"""
Unit normalization for flour quantities.

Every line item is converted to kilograms on its own before anything is
summed. Summing raw quantities across mixed units first is never valid.

Unknown units are treated as kilograms (quantity unchanged) so historical
records with irregular units still contribute to totals. Strict validation
belongs at ingestion, not here.
"""

from __future__ import annotations

import re

UNIT_KG = "KG"
UNIT_QUINTAL = "QUINTAL"
UNIT_TON = "TON"
UNIT_BAGS = "BAGS"

UNIT_FACTORS_KG = {
    UNIT_KG: 1,
    UNIT_QUINTAL: 100,
    UNIT_TON: 1000,
}

# Checked in order; the first match wins. The lookbehind stops "25kg" from
# matching the 5 kg rule.
BAG_WEIGHT_RULES: tuple[tuple[re.Pattern, int], ...] = (
    (re.compile(r"(?<![\d.])5\s*kg", re.IGNORECASE), 5),
    (re.compile(r"(?<![\d.])10\s*kg", re.IGNORECASE), 10),
    (re.compile(r"(?<![\d.])25\s*kg", re.IGNORECASE), 25),
    (re.compile(r"(?<![\d.])40\s*kg", re.IGNORECASE), 40),
    (re.compile(r"(?<![\d.])50\s*kg", re.IGNORECASE), 50),
)

GENERIC_BAG_WEIGHT = re.compile(r"(\d+(?:\.\d+)?)\s*kg", re.IGNORECASE)

# Flour is most commonly packed in 50 kg bags
DEFAULT_BAG_WEIGHT_KG = 50


def bag_weight_kg(packaging: str | None) -> float:
    """Weight of one bag as described by a packaging string, e.g. "25kg Bags"."""
    text = (packaging or "").strip()
    if text:
        for pattern, weight in BAG_WEIGHT_RULES:
            if pattern.search(text):
                return weight

        match = GENERIC_BAG_WEIGHT.search(text)
        if match:
            weight = float(match.group(1))
            if weight > 0:
                return int(weight) if weight.is_integer() else weight

    return DEFAULT_BAG_WEIGHT_KG


def normalize_to_kg(quantity: float | None, unit: str | None, packaging: str | None = None) -> float:
    """
    Convert a quantity expressed in `unit` to kilograms.

    - KG -> unchanged
    - Quintal -> x100
    - Ton -> x1000
    - Bags -> x bag weight parsed from packaging (default 50 kg)
    - anything else -> unchanged (treated as KG)
    """
    qty = float(quantity or 0)
    key = (unit or "").strip().upper()

    if key == UNIT_BAGS:
        return qty * bag_weight_kg(packaging)

    return qty * UNIT_FACTORS_KG.get(key, 1)


def order_kg(items) -> float:
    """Sum of normalized kilograms over line items, rounded to 2 decimals."""
    return round(
        sum(normalize_to_kg(item.quantity, item.unit, item.packaging) for item in items),
        2,
    )
