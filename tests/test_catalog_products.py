"""Categories, ingredients and products."""

import pytest

from services import (
    save_category, delete_category, validate_ingredient, save_ingredient, delete_ingredient,
    build_session, link_recipe, save_product, delete_product, save_recipe,
    RecipeDraft, ProductCostSession, CostMode,
    ValidationError, RecipeNotFound, SubmissionInProgress,
)


@pytest.fixture
def cake(store, ingredients):
    """Stored recipe with a batch cost of 10.00 (1 kg of flour)."""
    draft = RecipeDraft(store.index('ingredients'))
    draft.name = 'Queque'
    draft.description = 'Queque de harina'
    draft.quantity = 1
    draft.unit_of_measure = 'und'
    draft.register_as_ingredient = False
    draft.add_line(ingredients['flour'].id, 1, 'kg')
    return save_recipe(draft, store)


# ============================================
# CATEGORIES
# ============================================

def test_category_names_are_normalized(category):
    assert category.name == 'postres'


def test_duplicate_category_is_rejected(store, category):
    with pytest.raises(ValidationError):
        save_category('  POSTRES ', store=store)


def test_rename_category(store, category):
    renamed = save_category('Dulces', category_id=category.id, store=store)
    assert renamed.id == category.id
    assert renamed.name == 'dulces'


def test_category_name_is_required(store):
    with pytest.raises(ValidationError):
        save_category('', store=store)


def test_delete_category_keeps_products(store, category):
    session = ProductCostSession(manufacturing_cost=2.00, price=5.00)
    product = save_product(session, 'Alfajor', category.id, store=store)

    delete_category(category.id, store)

    assert store.select('categories') == []
    stored = store.get('products', product.id)
    assert stored is not None
    assert stored.category_id is None


# ============================================
# INGREDIENTS
# ============================================

def test_validate_ingredient_returns_clean_row():
    row = validate_ingredient('  Harina   Blanca ', 1, 'KG', 4.50)
    assert row == {'name': 'harina blanca', 'quantity': 1, 'unit_of_measure': 'kg', 'price': 4.50}


@pytest.mark.parametrize('name, quantity, unit, price, field', [
    ('', 1, 'kg', 1.0, 'name'),
    ('x' * 51, 1, 'kg', 1.0, 'name'),
    ('sal', None, 'kg', 1.0, 'quantity'),
    ('sal', 0, 'kg', 1.0, 'quantity'),
    ('sal', -2, 'kg', 1.0, 'quantity'),
    ('sal', 1, '', 1.0, 'unit_of_measure'),
    ('sal', 1, 'lb', 1.0, 'unit_of_measure'),
    ('sal', 1, 'kg', None, 'price'),
    ('sal', 1, 'kg', -0.5, 'price'),
])
def test_invalid_ingredient(name, quantity, unit, price, field):
    with pytest.raises(ValidationError) as exc:
        validate_ingredient(name, quantity, unit, price)
    assert exc.value.field == field


def test_free_ingredient_is_allowed():
    assert validate_ingredient('agua', 1, 'l', 0)['price'] == 0


def test_duplicate_ingredient_is_rejected(store, ingredients):
    with pytest.raises(ValidationError):
        save_ingredient('Flour', 500, 'g', 6.00, store=store)


def test_update_ingredient(store, ingredients):
    flour = ingredients['flour']
    updated = save_ingredient('flour', 1, 'kg', 12.00, ingredient_id=flour.id, store=store)
    assert updated.id == flour.id
    assert updated.price == 12.00
    assert updated.unit_of_measure == 'kg'


def test_recipe_cost_uses_updated_ingredient(store, ingredients, cake):
    save_ingredient('flour', 1000, 'g', 12.00, ingredient_id=ingredients['flour'].id, store=store)
    draft = RecipeDraft.for_recipe(cake, store.index('ingredients'))
    assert draft.manufacturing_cost == 12.00


def test_delete_unused_ingredient(store, ingredients):
    eggs_id = ingredients['eggs'].id
    assert delete_ingredient(eggs_id, store) == 0
    assert store.get('ingredients', eggs_id) is None


# ============================================
# PRODUCTS
# ============================================

def test_manual_session(store):
    session = build_session(manufacturing_cost=3.70, price=10, margin_title='Postres', store=store)
    assert session.mode is CostMode.MANUAL
    assert session.breakdown().suggested_price == 12.97


def test_session_linked_to_recipe(store, cake):
    session = build_session(recipe_id=cake.id, recipe_yield=4, store=store)
    assert session.mode is CostMode.RECIPE_LINKED
    assert session.link.batch_cost == 10.00
    assert session.manufacturing_cost == 2.50


def test_linked_session_ignores_typed_cost(store, cake):
    session = build_session(manufacturing_cost=1.00, recipe_id=cake.id, store=store)
    assert session.manufacturing_cost == 10.00


def test_switching_recipe_resets_yield(store, cake):
    session = build_session(recipe_id=cake.id, recipe_yield=4, previous_recipe_id=cake.id + 1, store=store)
    assert session.link.declared_yield == 1
    assert session.manufacturing_cost == 10.00


def test_same_recipe_keeps_yield(store, cake):
    session = build_session(recipe_id=cake.id, recipe_yield=4, previous_recipe_id=cake.id, store=store)
    assert session.manufacturing_cost == 2.50


def test_build_session_applies_suggested_price(store, cake):
    session = build_session(recipe_id=cake.id, recipe_yield=4, margin_title='Postres',
                            apply_suggested=True, store=store)
    # 2.50 + 0.13 waste = 2.63; 2.63 / 0.30
    assert session.price == 8.77


def test_link_unknown_recipe(store):
    with pytest.raises(RecipeNotFound):
        link_recipe(ProductCostSession(), 999, store)


def test_unknown_margin_is_rejected(store):
    with pytest.raises(ValidationError):
        build_session(margin_title='Helados', store=store)


def test_save_product(store, category, cake):
    session = build_session(recipe_id=cake.id, recipe_yield=4, price=9.90, store=store)
    product = save_product(session, 'Tajada de Queque', category.id, store=store)

    assert product.name == 'tajada de queque'
    assert product.category_id == category.id
    assert product.manufacturing_cost == 2.50
    assert product.price == 9.90
    assert not session.submitting


def test_update_product(store, category):
    product = save_product(ProductCostSession(manufacturing_cost=1.00, price=3.00), 'Café', category.id, store=store)
    session = ProductCostSession.for_product(product)
    session.set_price(3.50)
    updated = save_product(session, 'Café', category.id, product_id=product.id, store=store)
    assert updated.id == product.id
    assert updated.price == 3.50
    assert len(store.select('products')) == 1


@pytest.mark.parametrize('price', [0, 0.001])
def test_price_below_minimum_is_rejected(store, category, price):
    session = ProductCostSession(manufacturing_cost=1.00, price=price)
    with pytest.raises(ValidationError) as exc:
        save_product(session, 'Café', category.id, store=store)
    assert exc.value.field == 'price'
    assert store.select('products') == []


def test_product_needs_category(store):
    session = ProductCostSession(price=3.00)
    with pytest.raises(ValidationError) as exc:
        save_product(session, 'Café', None, store=store)
    assert exc.value.field == 'category_id'


def test_product_needs_existing_category(store):
    with pytest.raises(ValidationError):
        save_product(ProductCostSession(price=3.00), 'Café', 42, store=store)


def test_product_save_in_progress(store, category):
    session = ProductCostSession(price=3.00)
    session.begin_submit()
    with pytest.raises(SubmissionInProgress):
        save_product(session, 'Café', category.id, store=store)
    assert store.select('products') == []


def test_loss_making_product_is_saved(store, category):
    session = ProductCostSession(manufacturing_cost=5.00, price=4.00)
    product = save_product(session, 'Oferta', category.id, store=store)
    assert product.price == 4.00
    assert session.breakdown().is_loss


def test_delete_product(store, category):
    product = save_product(ProductCostSession(price=3.00), 'Café', category.id, store=store)
    delete_product(product.id, store)
    assert store.select('products') == []


@pytest.mark.parametrize('quantity, price, field', [
    (float('nan'), 1.0, 'quantity'),
    (float('inf'), 1.0, 'quantity'),
    (1, float('nan'), 'price'),
    (1, float('inf'), 'price'),
])
def test_non_finite_ingredient_values_are_rejected(store, quantity, price, field):
    with pytest.raises(ValidationError) as exc:
        save_ingredient('sal', quantity, 'kg', price, store=store)
    assert exc.value.field == field
    assert store.select('ingredients') == []


def test_ingredient_above_limits():
    with pytest.raises(ValidationError, match='at most'):
        validate_ingredient('sal', 1, 'kg', 1000000)
    with pytest.raises(ValidationError, match='at most'):
        validate_ingredient('sal', 1000000, 'kg', 1.0)


def test_price_above_maximum_is_rejected(store, category):
    session = ProductCostSession(manufacturing_cost=1.00, price=1000000)
    with pytest.raises(ValidationError, match='Price must be at most') as exc:
        save_product(session, 'Café', category.id, store=store)
    assert exc.value.field == 'price'
    assert store.select('products') == []
