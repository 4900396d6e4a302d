"""
Recipe Models

Contains the Recipe and RecipeIngredient models for managing
recipes and their ingredient lines.
"""

from .base import db


class Recipe(db.Model):
    """Recipe with yield, unit and derived manufacturing cost."""
    __tablename__ = 'recipes'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(50), unique=True, nullable=False, index=True)
    description = db.Column(db.Text, default='')
    quantity = db.Column(db.Float, default=0.0)  # Yield the recipe produces
    unit_of_measure = db.Column(db.String(10), nullable=False)
    manufacturing_cost = db.Column(db.Float, default=0.0)  # Derived from lines, never edited directly
    lines = db.relationship(
        'RecipeIngredient',
        backref='recipe',
        lazy=True,
        order_by='RecipeIngredient.id',
        cascade='all, delete-orphan',
    )


class RecipeIngredient(db.Model):
    """
    One ingredient line of a recipe.

    ingredient_id is a weak reference: deleting the ingredient leaves the
    line in place and costing reports the dangling id.
    """
    __tablename__ = 'recipe_ingredients'

    id = db.Column(db.Integer, primary_key=True)
    recipe_id = db.Column(db.Integer, db.ForeignKey('recipes.id'), nullable=False, index=True)
    ingredient_id = db.Column(db.Integer, nullable=False, index=True)
    quantity = db.Column(db.Float, nullable=False)
    unit_of_measure = db.Column(db.String(10), nullable=False)
