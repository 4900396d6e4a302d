"""
Cost Calculation Service

Functions for converting units and calculating ingredient and recipe costs.
"""

import logging
import math
from decimal import Decimal, ROUND_HALF_UP

from constants import FAMILY_CONVERSIONS, WEIGHT_UNITS, VOLUME_UNITS, COUNT_UNIT
from .exceptions import IngredientNotFound, InvalidIngredientStock, UnsupportedUnit

logger = logging.getLogger(__name__)

CENT = Decimal('0.01')


def to_decimal(value):
    """Convert a number to Decimal through its string form (0.1 -> Decimal('0.1'))."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value or 0))


def round2(value):
    """
    Round a monetary amount to 2 decimals, half away from zero.

    Works on the decimal string form of the value so 0.185 rounds to 0.19
    instead of following the binary float representation.
    """
    return float(to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP))


def normalize_unit(unit):
    """Lowercase and strip a unit string; None becomes ''."""
    return (unit or '').strip().lower()


def unit_family(unit):
    """Return 'weight', 'volume' or 'count' for a vocabulary unit, else None."""
    unit = normalize_unit(unit)
    for family, table in FAMILY_CONVERSIONS.items():
        if unit in table:
            return family
    return None


def convert_to_base(quantity, unit, family, strict=False):
    """
    Convert a quantity to the base unit of a measurement family.

    Weight converts to grams (kg x1000, g x1), volume to milliliters
    (l x1000, ml x1), count is already in und.

    Args:
        quantity: The quantity to convert
        unit: The unit the quantity is in (kg, g, l, ml, und)
        family: 'weight', 'volume' or 'count'
        strict: Raise UnsupportedUnit instead of returning quantity unchanged

    Returns:
        The quantity in the family's base unit. A unit outside the family
        comes back unchanged unless strict is set.
    """
    table = FAMILY_CONVERSIONS.get(family)
    if table is None:
        if strict:
            raise UnsupportedUnit(unit, family)
        return quantity

    factor = table.get(normalize_unit(unit))
    if factor is None:
        if strict:
            raise UnsupportedUnit(unit, family)
        return quantity

    return quantity * factor


def _ratio_cost(recipe_base, stock_base, price, stock_quantity, ingredient_name):
    if not stock_quantity or stock_quantity <= 0 or not stock_base or stock_base <= 0:
        raise InvalidIngredientStock(stock_quantity, ingredient_name)
    return (recipe_base / stock_base) * (price or 0.0)


def line_cost(recipe_qty, recipe_unit, ingredient_price, ingredient_stock_qty, ingredient_unit,
              ingredient_name=None):
    """
    Calculate the cost of one recipe line.

    Resolution order:
    - both weight units: compare in grams
    - both volume units: compare in milliliters
    - both und: compare counts directly
    - anything else (mismatched or unknown families): costs 0

    Args:
        recipe_qty: Quantity the recipe uses
        recipe_unit: Unit of recipe_qty
        ingredient_price: Price paid for the whole stocked quantity
        ingredient_stock_qty: Stocked quantity the price refers to
        ingredient_unit: Unit of ingredient_stock_qty
        ingredient_name: Only used in error and log messages

    Returns:
        Unrounded line cost

    Raises:
        InvalidIngredientStock: stocked quantity is missing, zero or negative
    """
    recipe_unit = normalize_unit(recipe_unit)
    ingredient_unit = normalize_unit(ingredient_unit)
    recipe_qty = recipe_qty or 0.0

    if recipe_unit in WEIGHT_UNITS and ingredient_unit in WEIGHT_UNITS:
        return _ratio_cost(
            convert_to_base(recipe_qty, recipe_unit, 'weight'),
            convert_to_base(ingredient_stock_qty or 0, ingredient_unit, 'weight'),
            ingredient_price, ingredient_stock_qty, ingredient_name,
        )

    if recipe_unit in VOLUME_UNITS and ingredient_unit in VOLUME_UNITS:
        return _ratio_cost(
            convert_to_base(recipe_qty, recipe_unit, 'volume'),
            convert_to_base(ingredient_stock_qty or 0, ingredient_unit, 'volume'),
            ingredient_price, ingredient_stock_qty, ingredient_name,
        )

    if recipe_unit == COUNT_UNIT and ingredient_unit == COUNT_UNIT:
        return _ratio_cost(recipe_qty, ingredient_stock_qty, ingredient_price,
                           ingredient_stock_qty, ingredient_name)

    logger.warning(
        'Unit mismatch for %s: recipe uses %r, stock is in %r; line costs 0',
        ingredient_name or 'ingredient', recipe_unit, ingredient_unit,
    )
    return 0.0


def calculate_ingredient_cost(line, ingredient):
    """
    Calculate the cost of a recipe line against an ingredient record.

    line needs quantity and unit_of_measure; ingredient needs price,
    quantity, unit_of_measure and name (models or any object with those
    attributes).
    """
    return line_cost(
        line.quantity,
        line.unit_of_measure,
        ingredient.price,
        ingredient.quantity,
        ingredient.unit_of_measure,
        ingredient_name=ingredient.name,
    )


def resolve_ingredient(ingredients_by_id, ingredient_id):
    """Look up an ingredient by id, raising IngredientNotFound for dangling references."""
    ingredient = ingredients_by_id.get(ingredient_id)
    if ingredient is None:
        raise IngredientNotFound(ingredient_id)
    return ingredient


def line_costs(lines, ingredients_by_id):
    """Return the unrounded cost of each line, in line order."""
    return [
        calculate_ingredient_cost(line, resolve_ingredient(ingredients_by_id, line.ingredient_id))
        for line in lines
    ]


def aggregate_recipe_cost(lines, ingredients_by_id):
    """
    Sum the cost of all recipe lines.

    Ingredient values are read from ingredients_by_id at call time, so the
    result always reflects the current price and stock of each ingredient.
    Lines are summed at full precision and rounded once.

    Args:
        lines: Iterable of objects with ingredient_id, quantity, unit_of_measure
        ingredients_by_id: Mapping of ingredient id -> ingredient

    Returns:
        Total manufacturing cost rounded to 2 decimals (0.0 for no lines)

    Raises:
        IngredientNotFound: a line references an id missing from the index
        InvalidIngredientStock: a referenced ingredient has no usable stock quantity
    """
    return round2(math.fsum(line_costs(lines, ingredients_by_id)))


def unit_cost_from_yield(total_cost, declared_yield):
    """
    Cost of one output unit of a recipe batch.

    The yield is clamped to at least 1 so a zero, negative or empty yield
    returns the batch cost itself.
    """
    safe_yield = max(declared_yield or 0, 1)
    return round2(to_decimal(total_cost) / to_decimal(safe_yield))
