"""
Product Service

Product form sessions and the product save sequence.
"""

import logging

from constants import MAX_LENGTHS, MAX_PRICE, MIN_PRODUCT_PRICE
from utils.sanitizer import sanitize_name
from .exceptions import ValidationError, RecipeNotFound, StoreError
from .pricing import ProductCostSession
from .store import RecordStore

logger = logging.getLogger(__name__)


def link_recipe(session, recipe_id, store=None):
    """Link a stored recipe to a product session using its current cost."""
    store = store or RecordStore()
    recipe = store.get('recipes', recipe_id)
    if recipe is None:
        raise RecipeNotFound(recipe_id)
    session.link_recipe(recipe.id, recipe.manufacturing_cost)
    return recipe


def build_session(manufacturing_cost=0.0, price=0.0, margin_title=None, recipe_id=None,
                  recipe_yield=None, apply_suggested=False, previous_recipe_id=None, store=None):
    """
    Replay the inputs of a product form onto a fresh session.

    Order matters: recipe link (which resets the yield), then yield, then
    margin and price, and finally the suggested price if requested.
    The posted yield is dropped when the form switched to another recipe
    (previous_recipe_id differs), so a newly selected recipe starts at 1.
    """
    session = ProductCostSession() if margin_title is None else ProductCostSession(margin_title=margin_title)
    if recipe_id:
        link_recipe(session, recipe_id, store)
        if recipe_yield is not None and previous_recipe_id in (None, recipe_id):
            session.set_yield(recipe_yield)
    else:
        session.set_manual_cost(manufacturing_cost)
    session.set_price(price)
    if apply_suggested:
        session.apply_suggested_price()
    return session


def validate_product(name, category_id, session):
    name = sanitize_name(name)
    if not name:
        raise ValidationError('Product name is required', field='name')
    if len(name) > MAX_LENGTHS['name']:
        raise ValidationError(f'Product name must be at most {MAX_LENGTHS["name"]} characters', field='name')
    if not category_id:
        raise ValidationError('Category is required', field='category_id')
    if session.manufacturing_cost < 0:
        raise ValidationError('Manufacturing cost cannot be negative', field='manufacturing_cost')
    if session.price < MIN_PRODUCT_PRICE:
        raise ValidationError(f'Price must be at least {MIN_PRODUCT_PRICE}', field='price')
    if session.price > MAX_PRICE:
        raise ValidationError(f'Price must be at most {MAX_PRICE}', field='price')
    return {
        'name': name,
        'category_id': category_id,
        'manufacturing_cost': session.manufacturing_cost,
        'price': session.price,
    }


def save_product(session, name, category_id, product_id=None, store=None):
    """
    Insert or update a product from a form session.

    Raises:
        SubmissionInProgress: the session is already saving
        ValidationError: invalid name, category or price
        StoreError: the store call failed
    """
    store = store or RecordStore()

    session.begin_submit()
    try:
        row = validate_product(name, category_id, session)
        if store.get('categories', category_id) is None:
            raise ValidationError('Category not found', field='category_id')

        if product_id is None:
            product = store.insert('products', row)
        else:
            product = store.update('products', product_id, row)
        logger.info('Saved product %r (id=%s, cost %.2f, price %.2f)',
                    product.name, product.id, product.manufacturing_cost, product.price)
        return product
    except StoreError as e:
        logger.error('Product save failed at %r: %s', e.step, e)
        raise
    finally:
        session.end_submit()


def delete_product(product_id, store=None):
    store = store or RecordStore()
    store.delete('products', product_id)
    logger.info('Deleted product id=%s', product_id)
