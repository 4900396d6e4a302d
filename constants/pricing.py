"""
Pricing Constants

Waste allowance and target margin presets used by the product pricing advisor.
"""

# Fixed production-loss surcharge applied to manufacturing cost
WASTE_FACTOR = 0.05

# Target margin presets (title -> percentage), in display order.
# The first entry is the default selection for a new product form.
TARGET_MARGIN_PRESETS = {
    'Bebidas': 25,
    'Postres': 30,
    'Para picar': 30,
    'Tortas & Cakes': 32,
    'Brunch & Sandwichs': 35,
}

DEFAULT_MARGIN_PRESET = next(iter(TARGET_MARGIN_PRESETS))

# Single fixed currency symbol for display
CURRENCY_SYMBOL = 'S/'
