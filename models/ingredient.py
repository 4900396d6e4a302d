"""
Ingredient Model

Contains the Ingredient model: a stocked item with the price paid
for a given quantity in one unit of the vocabulary.
"""

from .base import db


class Ingredient(db.Model):
    """
    Ingredient as it is bought or produced.

    price is the cost of the whole stocked quantity, so the cost of any
    recipe line is (line quantity / stocked quantity) * price once both
    quantities are in the same base unit (G, ML or und).

    A recipe saved with "register as ingredient" is mirrored here under
    the recipe's name, with quantity = recipe yield and price = recipe cost.
    """
    __tablename__ = 'ingredients'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(50), unique=True, nullable=False, index=True)

    # Stocked amount, in unit_of_measure (must be > 0 to resolve costs)
    quantity = db.Column(db.Float, nullable=False, default=1.0)
    unit_of_measure = db.Column(db.String(10), nullable=False, default='und')

    # Cost for the whole stocked quantity
    price = db.Column(db.Float, nullable=False, default=0.0)

    def __repr__(self):
        return f'<Ingredient {self.name!r} {self.quantity} {self.unit_of_measure} @ {self.price}>'
