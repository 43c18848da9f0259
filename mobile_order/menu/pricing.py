"""
Heuristic option pricing.
Backends historically sent option names without prices, so prices are
inferred from the names until a remote override supplies one.
"""

from decimal import Decimal

LARGE_SIZE_UPCHARGE = Decimal("10")
SIZE_INDEX_STEP = Decimal("5")
MILK_UPCHARGE = Decimal("20")
ADD_ON_PRICE = Decimal("0.50")
DEFAULT_BASE_PRICE = Decimal("4.50")

FREE_MILK_KEYWORDS = ("normal", "oat")


def infer_size_price_modifier(name: str, index: int) -> Decimal:
    """
    Upcharge for a size, in this order:
    1. name contains "large" -> LARGE_SIZE_UPCHARGE
    2. name contains "medium" or "small" -> 0
    3. otherwise -> index * SIZE_INDEX_STEP
    """
    lowered = name.lower()
    if "large" in lowered:
        return LARGE_SIZE_UPCHARGE
    if "medium" in lowered or "small" in lowered:
        return Decimal("0")
    return SIZE_INDEX_STEP * index


def infer_milk_price(name: str) -> Decimal:
    lowered = name.lower()
    if any(keyword in lowered for keyword in FREE_MILK_KEYWORDS):
        return Decimal("0")
    return MILK_UPCHARGE


def parse_price(value, default: Decimal) -> Decimal:
    """Parse a backend price, falling back when missing, invalid or negative"""
    if value is None or isinstance(value, bool):
        return default
    try:
        price = Decimal(str(value))
    except ArithmeticError:
        return default
    if not price.is_finite() or price < 0:
        return default
    return price
