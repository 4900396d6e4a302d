"""Pytest fixtures: testing config, a fresh in-memory database per test, sample data."""

import os
import sys

import pytest

# Must be set before the app module is imported
os.environ['FLASK_ENV'] = 'testing'

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app import app as flask_app  # noqa: E402
from models import db  # noqa: E402
from services import RecordStore, save_ingredient, save_category  # noqa: E402


@pytest.fixture
def app():
    """Application with all tables created in an in-memory SQLite database."""
    with flask_app.app_context():
        db.create_all()
        yield flask_app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def store(app):
    return RecordStore()


@pytest.fixture
def ingredients(store):
    """flour 1000 g @ 10.00, milk 1 l @ 4.80, eggs 12 und @ 6.00, keyed by name."""
    rows = [
        ('flour', 1000, 'g', 10.00),
        ('milk', 1, 'l', 4.80),
        ('eggs', 12, 'und', 6.00),
    ]
    return {
        name: save_ingredient(name, quantity, unit, price, store=store)
        for name, quantity, unit, price in rows
    }


@pytest.fixture
def category(store):
    return save_category('Postres', store=store)
