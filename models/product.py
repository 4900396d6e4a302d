"""
Product Model

Contains the Product model: an item on sale with its unit cost and price.
"""

from .base import db


class Product(db.Model):
    """Product sold by the café."""
    __tablename__ = 'products'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(50), nullable=False, index=True)
    # Weak reference, cleared when the category is deleted
    category_id = db.Column(db.Integer, db.ForeignKey('categories.id', ondelete='SET NULL'), nullable=True, index=True)
    manufacturing_cost = db.Column(db.Float, default=0.0)  # Manual or derived from a linked recipe
    price = db.Column(db.Float, nullable=False, default=0.0)
    category = db.relationship('Category')
