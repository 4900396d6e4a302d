"""
Unit Constants and Conversion Tables

Contains the unit vocabulary, conversion factors, and related constants
for recipe and product cost calculations.
"""

# Closed unit vocabulary used by ingredients, recipes and recipe lines
UNIT_VOCABULARY = ('kg', 'g', 'l', 'ml', 'und')

# Count unit (discrete items)
COUNT_UNIT = 'und'

# Weight conversions to G
WEIGHT_TO_G = {'kg': 1000, 'g': 1}

# Volume conversions to ML
VOLUME_TO_ML = {'l': 1000, 'ml': 1}

# Unit conversion factors per measurement family (family -> {unit: factor})
FAMILY_CONVERSIONS = {
    'weight': WEIGHT_TO_G,
    'volume': VOLUME_TO_ML,
    'count': {COUNT_UNIT: 1},
}

# Base unit each family converts to
FAMILY_BASE_UNITS = {'weight': 'g', 'volume': 'ml', 'count': COUNT_UNIT}

WEIGHT_UNITS = set(WEIGHT_TO_G)
VOLUME_UNITS = set(VOLUME_TO_ML)

# Labels for unit dropdowns
UNIT_LABELS = {
    'kg': 'Kilogramos (kg)',
    'g': 'Gramos (g)',
    'l': 'Litros (l)',
    'ml': 'Mililitros (ml)',
    'und': 'Unidades (und)',
}
