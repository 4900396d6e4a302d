"""
Smoke tests for the café back-office.
Run with: python tests/smoke.py
"""

import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

os.environ.setdefault('FLASK_ENV', 'testing')

def test_app_imports():
    """Verify app can be imported without errors."""
    from app import app, db
    assert app is not None
    assert db is not None
    print("OK: App imports successfully")

def test_models_import():
    """Verify models can be imported."""
    from models import Category, Ingredient, Recipe, RecipeIngredient, Product
    assert Ingredient.__tablename__ == 'ingredients'
    assert RecipeIngredient.__tablename__ == 'recipe_ingredients'
    assert Recipe is not None and Product is not None and Category is not None
    print("OK: Models import successfully")

def test_services_import():
    """Verify the costing services can be imported."""
    from services import convert_to_base, line_cost, aggregate_recipe_cost, price_product
    assert callable(convert_to_base)
    assert callable(line_cost)
    assert callable(aggregate_recipe_cost)
    assert callable(price_product)
    print("OK: Services import successfully")

def test_constants_import():
    """Verify constants can be imported."""
    from constants import UNIT_VOCABULARY, VOLUME_TO_ML, WEIGHT_TO_G, TARGET_MARGIN_PRESETS
    assert 'und' in UNIT_VOCABULARY
    assert 'l' in VOLUME_TO_ML
    assert 'Postres' in TARGET_MARGIN_PRESETS
    print("OK: Constants import successfully")

def test_conversion_constants_unchanged():
    """Verify critical conversion constants have expected values."""
    from constants import VOLUME_TO_ML, WEIGHT_TO_G, WASTE_FACTOR

    # These values must not change
    assert VOLUME_TO_ML['ml'] == 1
    assert VOLUME_TO_ML['l'] == 1000
    assert WEIGHT_TO_G['g'] == 1
    assert WEIGHT_TO_G['kg'] == 1000
    assert WASTE_FACTOR == 0.05
    print("OK: Conversion constants unchanged")

def test_app_runs():
    """Verify app can create test client."""
    from app import app, db
    app.config['TESTING'] = True
    with app.app_context():
        db.create_all()
    with app.test_client() as client:
        response = client.get('/')
        assert response.status_code == 200
        print("OK: App serves home page")

if __name__ == '__main__':
    print("Running smoke tests...\n")

    tests = [
        test_app_imports,
        test_models_import,
        test_services_import,
        test_constants_import,
        test_conversion_constants_unchanged,
        test_app_runs,
    ]

    failed = 0
    for test in tests:
        try:
            test()
        except Exception as e:
            print(f"FAIL: {test.__name__} - {e}")
            failed += 1

    print(f"\n{'='*40}")
    if failed:
        print(f"FAILED: {failed}/{len(tests)} tests")
        sys.exit(1)
    else:
        print(f"PASSED: {len(tests)}/{len(tests)} tests")
        sys.exit(0)
