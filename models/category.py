"""
Category Model

Product categories shown on the menu (drinks, desserts, ...).
"""

from .base import db


class Category(db.Model):
    """Leaf entity referenced by products."""
    __tablename__ = 'categories'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(50), unique=True, nullable=False, index=True)
