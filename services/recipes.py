"""
Recipe Service

The recipe form session (RecipeDraft) and the recipe save sequence.
"""

import logging
import math
from dataclasses import dataclass

from constants import VALID_UNITS, MAX_LENGTHS
from utils.sanitizer import sanitize_name, sanitize_text
from .cost import aggregate_recipe_cost, line_costs, round2, normalize_unit
from .exceptions import ServiceError, ValidationError, SubmissionInProgress, RecipeNotFound, StoreError
from .store import RecordStore

logger = logging.getLogger(__name__)


@dataclass
class DraftLine:
    """Ingredient line on a recipe being edited."""
    ingredient_id: int
    quantity: float
    unit_of_measure: str


class RecipeDraft:
    """
    Transient state of one recipe form.

    manufacturing_cost is recomputed after every edit that can change it:
    adding, removing or updating a line, and refreshing the ingredient
    snapshot. Lines keep insertion order and each ingredient appears once.
    """

    def __init__(self, ingredients_by_id, recipe=None):
        self.ingredients_by_id = dict(ingredients_by_id)
        self.recipe_id = recipe.id if recipe is not None else None
        self.original_name = recipe.name if recipe is not None else None
        self.name = recipe.name if recipe is not None else ''
        self.description = (recipe.description or '') if recipe is not None else ''
        self.quantity = recipe.quantity if recipe is not None else 0.0
        self.unit_of_measure = recipe.unit_of_measure if recipe is not None else ''
        self.register_as_ingredient = True
        self.lines = []
        self.missing_ingredient_ids = []
        self.manufacturing_cost = 0.0
        self.submitting = False

    @classmethod
    def for_recipe(cls, recipe, ingredients_by_id, drop_missing=False):
        """
        Open a draft on a stored recipe with its current lines.

        With drop_missing, lines pointing at deleted ingredients are left
        out and their ids kept in missing_ingredient_ids; otherwise the
        first dangling line raises IngredientNotFound.
        """
        draft = cls(ingredients_by_id, recipe=recipe)
        for line in recipe.lines:
            if drop_missing and line.ingredient_id not in draft.ingredients_by_id:
                draft.missing_ingredient_ids.append(line.ingredient_id)
                continue
            draft.lines.append(DraftLine(line.ingredient_id, line.quantity, line.unit_of_measure))
        draft.recompute()
        return draft

    @property
    def is_edit(self):
        return self.recipe_id is not None

    def begin_submit(self):
        if self.submitting:
            raise SubmissionInProgress()
        self.submitting = True

    def end_submit(self):
        self.submitting = False

    # ============================================
    # LINE EDITS
    # ============================================

    def add_line(self, ingredient_id, quantity, unit_of_measure):
        if ingredient_id not in self.ingredients_by_id:
            raise ValidationError('Select an ingredient from the list', field='ingredient_id')
        if any(line.ingredient_id == ingredient_id for line in self.lines):
            raise ValidationError('This ingredient is already in the recipe', field='ingredient_id')
        line = DraftLine(ingredient_id, *_validate_line(quantity, unit_of_measure))
        self.lines.append(line)
        try:
            self.recompute()
        except ServiceError:
            self.lines.pop()
            raise
        return line

    def update_line(self, ingredient_id, quantity=None, unit_of_measure=None):
        line = self._find_line(ingredient_id)
        previous = (line.quantity, line.unit_of_measure)
        quantity = line.quantity if quantity is None else quantity
        unit_of_measure = line.unit_of_measure if unit_of_measure is None else unit_of_measure
        line.quantity, line.unit_of_measure = _validate_line(quantity, unit_of_measure)
        try:
            self.recompute()
        except ServiceError:
            line.quantity, line.unit_of_measure = previous
            raise
        return line

    def remove_line(self, ingredient_id):
        self.lines = [line for line in self.lines if line.ingredient_id != ingredient_id]
        self.recompute()

    def refresh_ingredients(self, ingredients_by_id):
        """Swap in a new ingredient snapshot (prices or stock changed)."""
        self.ingredients_by_id = dict(ingredients_by_id)
        self.recompute()

    def _find_line(self, ingredient_id):
        for line in self.lines:
            if line.ingredient_id == ingredient_id:
                return line
        raise ValidationError(f'Ingredient {ingredient_id} is not in the recipe', field='ingredient_id')

    # ============================================
    # COSTING
    # ============================================

    def recompute(self):
        self.manufacturing_cost = aggregate_recipe_cost(self.lines, self.ingredients_by_id)
        return self.manufacturing_cost

    def cost_breakdown(self):
        """Return [(line, ingredient, cost)] with each cost rounded for display."""
        costs = line_costs(self.lines, self.ingredients_by_id)
        return [
            (line, self.ingredients_by_id[line.ingredient_id], round2(cost))
            for line, cost in zip(self.lines, costs)
        ]

    # ============================================
    # VALIDATION
    # ============================================

    def validate(self):
        name = sanitize_name(self.name)
        if not name:
            raise ValidationError('Recipe name is required', field='name')
        if len(name) > MAX_LENGTHS['name']:
            raise ValidationError(f'Recipe name must be at most {MAX_LENGTHS["name"]} characters', field='name')
        if not (self.description or '').strip():
            raise ValidationError('Recipe description is required', field='description')
        if not self.lines:
            raise ValidationError('Add at least one ingredient to the recipe', field='lines')
        if not self.unit_of_measure:
            raise ValidationError('Select a unit of measure for the recipe', field='unit_of_measure')
        if normalize_unit(self.unit_of_measure) not in VALID_UNITS:
            raise ValidationError(f'Invalid unit: {self.unit_of_measure}', field='unit_of_measure')

        quantity = _recipe_yield(self.quantity)
        if self.register_as_ingredient and quantity <= 0:
            raise ValidationError('Recipe yield must be greater than 0 to register it as an ingredient',
                                  field='quantity')

    def recipe_row(self):
        return {
            'name': sanitize_name(self.name),
            'description': sanitize_text(self.description, max_length=MAX_LENGTHS['description']),
            'quantity': _recipe_yield(self.quantity),
            'unit_of_measure': normalize_unit(self.unit_of_measure),
            'manufacturing_cost': self.manufacturing_cost,
        }


def _validate_line(quantity, unit_of_measure):
    try:
        quantity = float(quantity)
    except (TypeError, ValueError):
        raise ValidationError('Ingredient quantity must be a number', field='quantity') from None
    if not math.isfinite(quantity):
        raise ValidationError('Ingredient quantity must be a finite number', field='quantity')
    if quantity <= 0:
        raise ValidationError('Ingredient quantity must be greater than 0', field='quantity')
    unit = normalize_unit(unit_of_measure)
    if unit not in VALID_UNITS:
        raise ValidationError(f'Invalid unit: {unit_of_measure}', field='unit_of_measure')
    return quantity, unit


def _recipe_yield(quantity):
    """Recipe yield as a float; empty means 0, negative or non-finite is rejected."""
    try:
        quantity = float(quantity or 0.0)
    except (TypeError, ValueError):
        raise ValidationError('Recipe yield must be a number', field='quantity') from None
    if not math.isfinite(quantity) or quantity < 0:
        raise ValidationError('Recipe yield must be a number of 0 or more', field='quantity')
    return quantity


# ============================================
# SAVE / DELETE
# ============================================

def save_recipe(draft, store=None):
    """
    Save a recipe draft with its lines in one transaction.

    Steps:
    1. insert or update the recipes row
    2. (edit) delete the previous recipe_ingredients rows
    3. insert the current lines
    4. mirror the recipe into ingredients: update the existing mirror on
       edit, insert one when register_as_ingredient is set and none exists;
       a mirror needs a yield above 0, otherwise ValidationError rolls back

    Validation runs before any store call. A failure in any step rolls
    back all of them and raises StoreError naming the step.

    Returns:
        The saved Recipe
    """
    store = store or RecordStore()

    draft.begin_submit()
    try:
        draft.recompute()
        draft.validate()
        row = draft.recipe_row()
        clash = _first(store, 'recipes', name=row['name'])
        if clash is not None and clash.id != draft.recipe_id:
            raise ValidationError(f'A recipe named "{row["name"]}" already exists', field='name')

        with store.transaction():
            if draft.is_edit:
                if store.get('recipes', draft.recipe_id) is None:
                    raise RecipeNotFound(draft.recipe_id)
                recipe = store.update('recipes', draft.recipe_id, row)
                store.delete_where('recipe_ingredients', recipe_id=recipe.id)
                store.expire(recipe, 'lines')
            else:
                recipe = store.insert('recipes', row)

            for line in draft.lines:
                store.insert('recipe_ingredients', {
                    'recipe_id': recipe.id,
                    'ingredient_id': line.ingredient_id,
                    'quantity': line.quantity,
                    'unit_of_measure': line.unit_of_measure,
                })

            _mirror_as_ingredient(store, draft, row)

        logger.info('Saved recipe %r (id=%s, %d lines, cost %.2f)',
                    recipe.name, recipe.id, len(draft.lines), recipe.manufacturing_cost)
        draft.recipe_id = recipe.id
        draft.original_name = recipe.name
        return recipe
    except StoreError as e:
        logger.error('Recipe save failed at %r: %s', e.step, e)
        raise
    finally:
        draft.end_submit()


def _first(store, table, **filters):
    rows = store.select(table, **filters)
    return rows[0] if rows else None


def _mirror_as_ingredient(store, draft, row):
    """Keep the ingredient that mirrors this recipe in step with it."""
    mirror_row = {
        'name': row['name'],
        'quantity': row['quantity'],
        'unit_of_measure': row['unit_of_measure'],
        'price': row['manufacturing_cost'],
    }
    existing = _first(store, 'ingredients', name=draft.original_name) if draft.original_name else None
    if existing is None and draft.register_as_ingredient:
        existing = _first(store, 'ingredients', name=row['name'])
    if existing is None and not draft.register_as_ingredient:
        return

    # The mirror's stock quantity is a cost divisor for every recipe using it
    if not mirror_row['quantity'] > 0:
        raise ValidationError('Recipe yield must be greater than 0 while it is registered as an ingredient',
                              field='quantity')

    if existing is not None:
        clash = _first(store, 'ingredients', name=row['name'])
        if clash is not None and clash.id != existing.id:
            raise ValidationError(f'An ingredient named "{row["name"]}" already exists', field='name')
        store.update('ingredients', existing.id, mirror_row)
    else:
        store.insert('ingredients', mirror_row)


def delete_recipe(recipe_id, store=None):
    """Delete a recipe and its lines. Returns the deleted recipe's name."""
    store = store or RecordStore()
    recipe = store.get('recipes', recipe_id)
    if recipe is None:
        raise RecipeNotFound(recipe_id)
    name = recipe.name
    # Lines go with the recipe through the delete-orphan cascade
    with store.transaction():
        store.delete('recipes', recipe_id)
    logger.info('Deleted recipe %r (id=%s)', name, recipe_id)
    return name
