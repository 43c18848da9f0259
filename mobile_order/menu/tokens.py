"""
Token-based matching of remote customization overrides to menu options.

Menu data and remote config are authored independently, so an override of
type "oat" has to match options named "Oat Milk", "OAT-MILK" or "oat milk ".
Both sides are reduced to sets of token keys and matched on any shared key.
"""

import math
import re
from decimal import Decimal
from typing import Dict, List, Optional, Sequence, TypeVar

from pydantic import BaseModel

from mobile_order.schemas.remote_config import CustomizationOverride

GENERIC_WORDS = ("size", "milk", "option")
UNIT_WORDS = ("oz", "ml")

_SPLIT_RE = re.compile(r"[^a-z0-9]+")

OptionT = TypeVar("OptionT", bound=BaseModel)


def customization_tokens(value: str) -> List[str]:
    """Match keys for an option name or override type, most specific first"""
    if not value:
        return []

    tokens = [
        token
        for token in _SPLIT_RE.split(value.lower())
        if token
        and token not in GENERIC_WORDS
        and token not in UNIT_WORDS
        and not token.isdigit()
    ]

    # dict keeps insertion order and drops duplicates
    keys: Dict[str, None] = {}
    joined = "".join(tokens)
    if joined:
        keys[joined] = None

    for token in tokens:
        keys[token] = None
        for suffix in GENERIC_WORDS:
            if token.endswith(suffix) and len(token) > len(suffix):
                keys[token[: -len(suffix)]] = None

    return list(keys)


def build_override_map(
    overrides: Sequence[CustomizationOverride],
) -> Dict[str, CustomizationOverride]:
    override_map: Dict[str, CustomizationOverride] = {}
    for override in overrides:
        if not isinstance(override.type, str):
            continue
        for key in customization_tokens(override.type):
            # Later entries win for a shared key
            override_map[key] = override
    return override_map


def find_override(
    name: str,
    override_map: Dict[str, CustomizationOverride],
) -> Optional[CustomizationOverride]:
    for key in customization_tokens(name):
        if key in override_map:
            return override_map[key]
    return None


def override_price(override: CustomizationOverride) -> Optional[Decimal]:
    """The configured price if it is a finite, non-negative number"""
    price = override.price
    if isinstance(price, bool) or not isinstance(price, (int, float)):
        return None
    if not math.isfinite(price) or price < 0:
        return None
    return Decimal(str(price))


def apply_overrides(
    options: List[OptionT],
    overrides: Optional[Sequence[CustomizationOverride]],
    price_field: str,
) -> List[OptionT]:
    """
    Toggle and re-price options that match an override.
    Options are never added or removed; unmatched options pass through.
    """
    if not overrides:
        return options

    override_map = build_override_map(overrides)
    if not override_map:
        return options

    result = []
    for option in options:
        override = find_override(option.name, override_map)
        if override is None:
            result.append(option)
            continue

        update = {"enabled": override.enable is not False}
        price = override_price(override)
        if price is not None:
            update[price_field] = price
        result.append(option.model_copy(update=update))

    return result
