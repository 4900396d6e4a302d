"""
Catalog Service

Create, update and delete categories and ingredients.
"""

import logging
import math

from constants import VALID_UNITS, MAX_LENGTHS, MAX_QUANTITY, MAX_PRICE
from utils.sanitizer import sanitize_name
from .cost import normalize_unit
from .exceptions import ValidationError
from .store import RecordStore

logger = logging.getLogger(__name__)


def _clean_name(name, label):
    name = sanitize_name(name)
    if not name:
        raise ValidationError(f'{label} name is required', field='name')
    if len(name) > MAX_LENGTHS['name']:
        raise ValidationError(f'{label} name must be at most {MAX_LENGTHS["name"]} characters', field='name')
    return name


def _check_unique(store, table, name, label, current_id=None):
    for row in store.select(table, name=name):
        if row.id != current_id:
            raise ValidationError(f'{label} "{name}" already exists', field='name')


# ============================================
# CATEGORIES
# ============================================

def save_category(name, category_id=None, store=None):
    """Insert a category, or rename it when category_id is given."""
    store = store or RecordStore()
    name = _clean_name(name, 'Category')
    _check_unique(store, 'categories', name, 'Category', category_id)

    if category_id is None:
        category = store.insert('categories', {'name': name})
    else:
        category = store.update('categories', category_id, {'name': name})
    logger.info('Saved category %r (id=%s)', category.name, category.id)
    return category


def delete_category(category_id, store=None):
    """Delete a category; products in it keep existing without one."""
    store = store or RecordStore()
    with store.transaction():
        store.update_where('products', {'category_id': None}, category_id=category_id)
        store.delete('categories', category_id)
    logger.info('Deleted category id=%s', category_id)


# ============================================
# INGREDIENTS
# ============================================

def validate_ingredient(name, quantity, unit_of_measure, price):
    """
    Validate ingredient form values.

    Returns:
        Row dict ready for the store

    Raises:
        ValidationError: missing name, quantity not > 0, unknown unit or negative price
    """
    name = _clean_name(name, 'Ingredient')

    if quantity is None:
        raise ValidationError('Quantity is required', field='quantity')
    if not math.isfinite(quantity):
        raise ValidationError('Quantity must be a finite number', field='quantity')
    if quantity <= 0:
        raise ValidationError('Quantity must be greater than 0', field='quantity')
    if quantity > MAX_QUANTITY:
        raise ValidationError(f'Quantity must be at most {MAX_QUANTITY}', field='quantity')

    unit = normalize_unit(unit_of_measure)
    if not unit:
        raise ValidationError('Select a unit of measure', field='unit_of_measure')
    if unit not in VALID_UNITS:
        raise ValidationError(f'Invalid unit: {unit_of_measure}', field='unit_of_measure')

    if price is None:
        raise ValidationError('Price is required', field='price')
    if not math.isfinite(price):
        raise ValidationError('Price must be a finite number', field='price')
    if price < 0:
        raise ValidationError('Price cannot be negative', field='price')
    if price > MAX_PRICE:
        raise ValidationError(f'Price must be at most {MAX_PRICE}', field='price')

    return {'name': name, 'quantity': quantity, 'unit_of_measure': unit, 'price': price}


def save_ingredient(name, quantity, unit_of_measure, price, ingredient_id=None, store=None):
    """Insert an ingredient, or update it when ingredient_id is given."""
    store = store or RecordStore()
    row = validate_ingredient(name, quantity, unit_of_measure, price)
    _check_unique(store, 'ingredients', row['name'], 'Ingredient', ingredient_id)

    if ingredient_id is None:
        ingredient = store.insert('ingredients', row)
    else:
        ingredient = store.update('ingredients', ingredient_id, row)
    logger.info('Saved ingredient %r (id=%s)', ingredient.name, ingredient.id)
    return ingredient


def delete_ingredient(ingredient_id, store=None):
    """
    Delete an ingredient.

    Recipe lines that use it are left in place; those recipes report the
    missing ingredient until they are edited. Returns the number of
    recipes affected.
    """
    store = store or RecordStore()
    affected = {line.recipe_id for line in store.select('recipe_ingredients', ingredient_id=ingredient_id)}
    store.delete('ingredients', ingredient_id)
    if affected:
        logger.warning('Deleted ingredient id=%s still used by %d recipe(s)', ingredient_id, len(affected))
    else:
        logger.info('Deleted ingredient id=%s', ingredient_id)
    return len(affected)
