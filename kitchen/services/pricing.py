"""Unit pricing for configured food items."""

from kitchen.models.enums import ProteinType, ExtraSideType

# Surcharge per protein choice (Naira)
PROTEIN_SURCHARGES = {
    ProteinType.FRIED_CHICKEN.value: 0,  # Default - no extra charge
    ProteinType.GRILLED_FISH.value: 500,
    ProteinType.BEEF.value: 700,
}

# Surcharge per extra side (Naira)
EXTRA_SIDE_SURCHARGES = {
    ExtraSideType.FRIED_PLANTAIN.value: 300,
    ExtraSideType.COLESLAW.value: 200,
    ExtraSideType.EXTRA_PEPPER_SAUCE.value: 100,
}


def _key(value):
    return value.value if hasattr(value, 'value') else value


def unit_price(base_price, selected_protein=None, selected_extra_sides=None):
    """Price of one unit: base price plus protein and side surcharges.

    Unknown protein or side keys add nothing.
    """
    price = base_price
    if selected_protein:
        price += PROTEIN_SURCHARGES.get(_key(selected_protein), 0)
    for side in selected_extra_sides or ():
        price += EXTRA_SIDE_SURCHARGES.get(_key(side), 0)
    return price


def normalize_sides(selected_extra_sides):
    """Drop duplicate sides, keeping first-seen order."""
    seen = []
    for side in selected_extra_sides or ():
        side = _key(side)
        if side not in seen:
            seen.append(side)
    return seen


def selection_signature(food_item_id, selected_protein=None, selected_extra_sides=None):
    """Key identifying a cart line; side order does not matter."""
    sides = ','.join(sorted(normalize_sides(selected_extra_sides)))
    return f'{food_item_id}|{_key(selected_protein) or ""}|{sides}'
