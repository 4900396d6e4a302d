"""
Validation Constants

Contains whitelist values and limits for validating user input
and ensuring data integrity.
"""

from .units import UNIT_VOCABULARY

# Valid values for any unit_of_measure field (whitelist)
VALID_UNITS = set(UNIT_VOCABULARY)

# Maximum field lengths
MAX_LENGTHS = {
    'name': 50,
    'description': 2000,
}

# Upper bound for quantities and prices entered in forms
MAX_QUANTITY = 999999
MAX_PRICE = 999999.99

# Smallest sale price accepted for a product
MIN_PRODUCT_PRICE = 0.01
