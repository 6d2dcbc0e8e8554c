"""Category classification rules.

Every leaf category belongs to exactly one of three groups:

* ``needs`` – essential expenses
* ``lifestyle`` – discretionary expenses
* ``savings`` – money set aside for goals

Older data used a two-tier ``need``/``want`` vocabulary in a ``priority``
field.  :func:`normalize_group` maps that vocabulary onto the current groups.
"""

from __future__ import annotations

from typing import Dict, List, Optional

NEEDS = 'needs'
LIFESTYLE = 'lifestyle'
SAVINGS = 'savings'

GROUPS = (NEEDS, LIFESTYLE, SAVINGS)

# Two-tier vocabulary from before the savings group existed
LEGACY_GROUP_ALIASES: Dict[str, str] = {
    'need': NEEDS,
    'want': LIFESTYLE,
}

NEEDS_CATEGORIES: List[str] = [
    'FoodGroceries',
    'Meals',
    'Transport',
    'Fuel',
    'RentUtilities',
    'Education',
    'HealthHygiene',
]

LIFESTYLE_CATEGORIES: List[str] = [
    'EatingOut',
    'Entertainment',
    'Shopping',
    'TravelTrips',
    'Hobbies',
    'Gifts',
]

SAVINGS_CATEGORIES: List[str] = [
    'EmergencyFund',
    'Gadgets',
    'FutureGoals',
]

ALL_CATEGORIES: List[str] = NEEDS_CATEGORIES + LIFESTYLE_CATEGORIES + SAVINGS_CATEGORIES

CATEGORY_TO_GROUP: Dict[str, str] = {
    **{category: NEEDS for category in NEEDS_CATEGORIES},
    **{category: LIFESTYLE for category in LIFESTYLE_CATEGORIES},
    **{category: SAVINGS for category in SAVINGS_CATEGORIES},
}

CATEGORY_LABELS: Dict[str, str] = {
    'FoodGroceries': 'Food & Groceries',
    'Meals': 'Meals',
    'Transport': 'Transport',
    'Fuel': 'Fuel',
    'RentUtilities': 'Rent & Utilities',
    'Education': 'Education',
    'HealthHygiene': 'Health & Hygiene',
    'EatingOut': 'Eating Out',
    'Entertainment': 'Entertainment',
    'Shopping': 'Shopping',
    'TravelTrips': 'Travel & Trips',
    'Hobbies': 'Hobbies',
    'Gifts': 'Gifts',
    'EmergencyFund': 'Emergency Fund',
    'Gadgets': 'Gadgets',
    'FutureGoals': 'Future Goals',
}

CATEGORY_DESCRIPTIONS: Dict[str, str] = {
    'FoodGroceries': 'Daily groceries and essentials',
    'Meals': 'Regular meals and food',
    'Transport': 'Local travel, bus, metro, auto',
    'Fuel': 'Vehicle fuel',
    'RentUtilities': 'Hostel/PG rent, electricity, water, internet',
    'Education': 'Books, study materials, tuition fees',
    'HealthHygiene': 'Medicines, doctor visits, toiletries',
    'EatingOut': 'Restaurants, cafés, coffee shops',
    'Entertainment': 'Movies, games, OTT subscriptions',
    'Shopping': 'Clothes, accessories',
    'TravelTrips': 'Vacations, weekend trips',
    'Hobbies': 'Sports, music, events',
    'Gifts': 'Presents, celebrations',
    'EmergencyFund': 'Emergency fund savings',
    'Gadgets': 'Saving for phone, laptop, etc.',
    'FutureGoals': 'Future trips, courses, goals',
}

GROUP_LABELS: Dict[str, str] = {
    NEEDS: 'Needs',
    LIFESTYLE: 'Lifestyle',
    SAVINGS: 'Savings & Goals',
}

GROUP_DESCRIPTIONS: Dict[str, str] = {
    NEEDS: 'Essential expenses you must spend on',
    LIFESTYLE: 'Discretionary expenses for comfort and fun',
    SAVINGS: 'Money saved for future goals',
}


def category_group(category: str) -> Optional[str]:
    """Return the group a category belongs to, or ``None`` if unknown.

    Example:
        >>> category_group('Shopping')
        'lifestyle'
    """
    return CATEGORY_TO_GROUP.get(category)


def is_known_category(category: Optional[str]) -> bool:
    return category in CATEGORY_TO_GROUP


def normalize_group(value: Optional[str]) -> Optional[str]:
    """Map a stored group or legacy priority value onto the current vocabulary.

    Args:
        value: Raw ``categoryGroup`` or ``priority`` value

    Returns:
        One of ``needs``/``lifestyle``/``savings``, the stripped value
        unchanged if it is not recognized, or ``None`` when empty.
    """
    if value is None:
        return None
    text = str(value).strip().lower()
    if not text:
        return None
    if text in GROUPS:
        return text
    return LEGACY_GROUP_ALIASES.get(text, text)


def categories_for_group(group: str) -> List[str]:
    """List the leaf categories of a group (empty for unknown groups)."""
    if group == NEEDS:
        return list(NEEDS_CATEGORIES)
    if group == LIFESTYLE:
        return list(LIFESTYLE_CATEGORIES)
    if group == SAVINGS:
        return list(SAVINGS_CATEGORIES)
    return []


def category_label(category: str) -> str:
    return CATEGORY_LABELS.get(category, category)
