"""
Constants Package

Unit tables, pricing presets and validation whitelists.
"""

from .units import (
    UNIT_VOCABULARY,
    COUNT_UNIT,
    WEIGHT_TO_G,
    VOLUME_TO_ML,
    FAMILY_CONVERSIONS,
    FAMILY_BASE_UNITS,
    WEIGHT_UNITS,
    VOLUME_UNITS,
    UNIT_LABELS,
)

from .pricing import (
    WASTE_FACTOR,
    TARGET_MARGIN_PRESETS,
    DEFAULT_MARGIN_PRESET,
    CURRENCY_SYMBOL,
)

from .validation import (
    VALID_UNITS,
    MAX_LENGTHS,
    MAX_QUANTITY,
    MAX_PRICE,
    MIN_PRODUCT_PRICE,
)

__all__ = [
    # Units
    'UNIT_VOCABULARY',
    'COUNT_UNIT',
    'WEIGHT_TO_G',
    'VOLUME_TO_ML',
    'FAMILY_CONVERSIONS',
    'FAMILY_BASE_UNITS',
    'WEIGHT_UNITS',
    'VOLUME_UNITS',
    'UNIT_LABELS',
    # Pricing
    'WASTE_FACTOR',
    'TARGET_MARGIN_PRESETS',
    'DEFAULT_MARGIN_PRESET',
    'CURRENCY_SYMBOL',
    # Validation
    'VALID_UNITS',
    'MAX_LENGTHS',
    'MAX_QUANTITY',
    'MAX_PRICE',
    'MIN_PRODUCT_PRICE',
]
