import logging

from flask import Flask, render_template, request, redirect, url_for, flash, jsonify
from flask_migrate import Migrate

from config import get_config
from constants import (
    UNIT_VOCABULARY, UNIT_LABELS, TARGET_MARGIN_PRESETS, DEFAULT_MARGIN_PRESET, CURRENCY_SYMBOL,
)
from models import db, Category, Ingredient, Recipe, Product
from services import (
    ServiceError, ValidationError, StoreError, IngredientNotFound,
    RecordStore, RecipeDraft, save_recipe, delete_recipe,
    save_category, delete_category, save_ingredient, delete_ingredient,
    build_session, save_product, delete_product, ProductCostSession,
)
from utils import sanitize_text

app = Flask(__name__)
app.config.from_object(get_config())

db.init_app(app)
migrate = Migrate(app, db)

logging.basicConfig(
    level=app.config['LOG_LEVEL'],
    format='%(asctime)s %(levelname)s %(name)s: %(message)s',
)
logger = logging.getLogger(__name__)


def safe_float(value, default=0.0, min_val=None, max_val=None):
    """Safely parse a float value with optional bounds."""
    try:
        result = float(value) if value not in (None, '') else default
        if result is None:
            return None
        if min_val is not None:
            result = max(min_val, result)
        if max_val is not None:
            result = min(max_val, result)
        return result
    except (ValueError, TypeError):
        return default


def safe_int(value, default=None, min_val=None, max_val=None):
    """Safely parse an integer value with optional bounds."""
    try:
        result = int(value) if value not in (None, '') else default
        if result is None:
            return None
        if min_val is not None:
            result = max(min_val, result)
        if max_val is not None:
            result = min(max_val, result)
        return result
    except (ValueError, TypeError):
        return default


def name_filter(query, model):
    """Apply the ?q= name search used by every list page."""
    q = sanitize_text(request.args.get('q', ''), max_length=50).lower()
    if q:
        query = query.filter(model.name.ilike(f'%{q}%'))
    return query.order_by(model.name), q


@app.context_processor
def inject_constants():
    return {
        'currency': CURRENCY_SYMBOL,
        'units': UNIT_VOCABULARY,
        'unit_labels': UNIT_LABELS,
        'margin_presets': TARGET_MARGIN_PRESETS,
    }


# ============================================
# ROUTES - HOME
# ============================================

@app.route('/')
def index():
    counts = {
        'categories': Category.query.count(),
        'ingredients': Ingredient.query.count(),
        'recipes': Recipe.query.count(),
        'products': Product.query.count(),
    }
    return render_template('index.html', counts=counts)

# ============================================
# ROUTES - CATEGORIES
# ============================================

@app.route('/categories')
def categories_list():
    query, q = name_filter(Category.query, Category)
    return render_template('categories.html', categories=query.all(), q=q)

@app.route('/category/add', methods=['POST'])
def category_add():
    try:
        category = save_category(request.form.get('name', ''))
        flash(f'Category "{category.name}" added!', 'success')
    except (ValidationError, StoreError) as e:
        flash(str(e), 'danger')
    return redirect(url_for('categories_list'))

@app.route('/category/<int:id>/edit', methods=['POST'])
def category_edit(id):
    db.get_or_404(Category, id)
    try:
        category = save_category(request.form.get('name', ''), category_id=id)
        flash(f'Category "{category.name}" updated!', 'success')
    except (ValidationError, StoreError) as e:
        flash(str(e), 'danger')
    return redirect(url_for('categories_list'))

@app.route('/category/<int:id>/delete', methods=['POST'])
def category_delete(id):
    name = db.get_or_404(Category, id).name
    try:
        delete_category(id)
        flash(f'Category "{name}" deleted!', 'success')
    except StoreError as e:
        flash(str(e), 'danger')
    return redirect(url_for('categories_list'))

# ============================================
# ROUTES - INGREDIENTS
# ============================================

@app.route('/ingredients')
def ingredients_list():
    query, q = name_filter(Ingredient.query, Ingredient)
    return render_template('ingredients.html', ingredients=query.all(), q=q)

def _ingredient_form_values():
    return {
        'name': request.form.get('name', ''),
        'quantity': safe_float(request.form.get('quantity'), default=None),
        'unit_of_measure': request.form.get('unit_of_measure', ''),
        'price': safe_float(request.form.get('price'), default=None),
    }

@app.route('/ingredient/add', methods=['POST'])
def ingredient_add():
    try:
        ingredient = save_ingredient(**_ingredient_form_values())
        flash(f'Ingredient "{ingredient.name}" added!', 'success')
    except (ValidationError, StoreError) as e:
        flash(str(e), 'danger')
    return redirect(url_for('ingredients_list'))

@app.route('/ingredient/<int:id>/edit', methods=['POST'])
def ingredient_edit(id):
    db.get_or_404(Ingredient, id)
    try:
        ingredient = save_ingredient(ingredient_id=id, **_ingredient_form_values())
        flash(f'Ingredient "{ingredient.name}" updated!', 'success')
    except (ValidationError, StoreError) as e:
        flash(str(e), 'danger')
    return redirect(url_for('ingredients_list'))

@app.route('/ingredient/<int:id>/delete', methods=['POST'])
def ingredient_delete(id):
    name = db.get_or_404(Ingredient, id).name
    try:
        in_use = delete_ingredient(id)
        flash(f'Ingredient "{name}" deleted!', 'success')
        if in_use:
            flash(f'{in_use} recipe(s) still list "{name}"; edit them to update their cost', 'warning')
    except StoreError as e:
        flash(str(e), 'danger')
    return redirect(url_for('ingredients_list'))

# ============================================
# ROUTES - RECIPES
# ============================================

@app.route('/recipes')
def recipes_list():
    query, q = name_filter(Recipe.query, Recipe)
    return render_template('recipes.html', recipes=query.all(), q=q)

def _fill_recipe_draft(draft):
    """Replay the posted recipe form onto a draft."""
    draft.name = request.form.get('name', '')
    draft.description = request.form.get('description', '')
    draft.quantity = safe_float(request.form.get('quantity'), default=0.0, min_val=0.0)
    draft.unit_of_measure = request.form.get('unit_of_measure', '')
    draft.register_as_ingredient = request.form.get('register_as_ingredient') == '1'

    lines = zip(
        request.form.getlist('ingredient_id'),
        request.form.getlist('line_quantity'),
        request.form.getlist('line_unit'),
    )
    for ingredient_id, quantity, unit in lines:
        ingredient_id = safe_int(ingredient_id)
        if ingredient_id is None:
            raise ValidationError('Invalid ingredient selected', field='ingredient_id')
        draft.add_line(ingredient_id, safe_float(quantity, default=None), unit)

def _render_recipe_form(draft, ingredients):
    breakdown = []
    try:
        breakdown = draft.cost_breakdown()
    except ServiceError as e:
        flash(str(e), 'warning')
    return render_template('recipe_form.html', draft=draft, breakdown=breakdown,
                           ingredients=sorted(ingredients.values(), key=lambda i: i.name))

def _submit_recipe(recipe=None):
    store = RecordStore()
    ingredients = store.index('ingredients')
    draft = RecipeDraft(ingredients, recipe=recipe)
    try:
        _fill_recipe_draft(draft)
        saved = save_recipe(draft, store)
    except ServiceError as e:
        flash(str(e), 'danger')
        return _render_recipe_form(draft, ingredients)
    verb = 'updated' if recipe is not None else 'created'
    flash(f'Recipe "{saved.name}" {verb}! Cost: {CURRENCY_SYMBOL} {saved.manufacturing_cost:.2f}', 'success')
    return redirect(url_for('recipes_list'))

@app.route('/recipe/add', methods=['GET', 'POST'])
def recipe_add():
    if request.method == 'POST':
        return _submit_recipe()
    ingredients = RecordStore().index('ingredients')
    return _render_recipe_form(RecipeDraft(ingredients), ingredients)

@app.route('/recipe/<int:id>/edit', methods=['GET', 'POST'])
def recipe_edit(id):
    recipe = db.get_or_404(Recipe, id)
    if request.method == 'POST':
        return _submit_recipe(recipe)

    ingredients = RecordStore().index('ingredients')
    try:
        draft = RecipeDraft.for_recipe(recipe, ingredients, drop_missing=True)
    except ServiceError as e:
        flash(str(e), 'danger')
        return redirect(url_for('recipes_list'))
    if draft.missing_ingredient_ids:
        flash(f'{len(draft.missing_ingredient_ids)} ingredient(s) of this recipe were deleted '
              'and have been removed from the form', 'warning')
    return _render_recipe_form(draft, ingredients)

@app.route('/recipe/<int:id>/delete', methods=['POST'])
def recipe_delete(id):
    try:
        name = delete_recipe(id)
        flash(f'Recipe "{name}" deleted!', 'success')
    except ServiceError as e:
        flash(str(e), 'danger')
    return redirect(url_for('recipes_list'))

# ============================================
# ROUTES - PRODUCTS
# ============================================

@app.route('/products')
def products_list():
    query, q = name_filter(Product.query, Product)
    return render_template('products.html', products=query.all(), q=q)

def _product_session_from_form(apply_suggested=False):
    return build_session(
        manufacturing_cost=safe_float(request.form.get('manufacturing_cost'), default=0.0, min_val=0.0),
        price=safe_float(request.form.get('price'), default=0.0, min_val=0.0),
        margin_title=request.form.get('margin') or DEFAULT_MARGIN_PRESET,
        recipe_id=safe_int(request.form.get('recipe_id')),
        recipe_yield=safe_float(request.form.get('recipe_yield'), default=None),
        previous_recipe_id=safe_int(request.form.get('linked_recipe_id')),
        apply_suggested=apply_suggested,
    )

def _render_product_form(session, product=None, values=None):
    return render_template(
        'product_form.html',
        product=product,
        session=session,
        pricing=session.breakdown(),
        values=values or {},
        categories=Category.query.order_by(Category.name).all(),
        recipes=Recipe.query.order_by(Recipe.name).all(),
    )

def _submit_product(product=None):
    values = {
        'name': request.form.get('name', ''),
        'category_id': safe_int(request.form.get('category_id')),
    }
    action = request.form.get('action', 'save')
    session = ProductCostSession()
    try:
        session = _product_session_from_form(apply_suggested=(action == 'apply_suggested'))
        if action != 'save':
            return _render_product_form(session, product, values)
        saved = save_product(session, values['name'], values['category_id'],
                             product_id=product.id if product is not None else None)
    except ServiceError as e:
        flash(str(e), 'danger')
        return _render_product_form(session, product, values)

    pricing = session.breakdown()
    flash(f'Product "{saved.name}" saved!', 'success')
    if pricing.is_loss:
        flash(f'Price is below total cost: loss of {CURRENCY_SYMBOL} {-pricing.profit:.2f} per unit', 'warning')
    return redirect(url_for('products_list'))

@app.route('/product/add', methods=['GET', 'POST'])
def product_add():
    if request.method == 'POST':
        return _submit_product()
    return _render_product_form(ProductCostSession())

@app.route('/product/<int:id>/edit', methods=['GET', 'POST'])
def product_edit(id):
    product = db.get_or_404(Product, id)
    if request.method == 'POST':
        return _submit_product(product)
    values = {'name': product.name, 'category_id': product.category_id}
    return _render_product_form(ProductCostSession.for_product(product), product, values)

@app.route('/product/<int:id>/delete', methods=['POST'])
def product_delete(id):
    name = db.get_or_404(Product, id).name
    try:
        delete_product(id)
        flash(f'Product "{name}" deleted!', 'success')
    except StoreError as e:
        flash(str(e), 'danger')
    return redirect(url_for('products_list'))

# ============================================
# ROUTES - LIVE RECOMPUTATION (JSON)
# ============================================

@app.route('/api/recipes/cost', methods=['POST'])
def api_recipe_cost():
    """Cost of a recipe being edited; called by the form on every line change."""
    data = request.get_json(silent=True) or {}
    draft = RecipeDraft(RecordStore().index('ingredients'))
    try:
        for line in data.get('lines', []):
            draft.add_line(safe_int(line.get('ingredient_id')),
                           safe_float(line.get('quantity'), default=None),
                           line.get('unit_of_measure'))
        breakdown = draft.cost_breakdown()
    except ServiceError as e:
        return jsonify({'error': str(e), 'field': getattr(e, 'field', None)}), 400

    return jsonify({
        'lines': [
            {
                'ingredient_id': line.ingredient_id,
                'ingredient_name': ingredient.name,
                'quantity': line.quantity,
                'unit_of_measure': line.unit_of_measure,
                'cost': cost,
            }
            for line, ingredient, cost in breakdown
        ],
        'total': draft.manufacturing_cost,
    })

@app.route('/api/products/pricing', methods=['POST'])
def api_product_pricing():
    """Pricing of a product being edited; called on every cost, yield, margin or price change."""
    data = request.get_json(silent=True) or {}
    try:
        session = build_session(
            manufacturing_cost=safe_float(data.get('manufacturing_cost'), default=0.0, min_val=0.0),
            price=safe_float(data.get('price'), default=0.0, min_val=0.0),
            margin_title=data.get('margin') or DEFAULT_MARGIN_PRESET,
            recipe_id=safe_int(data.get('recipe_id')),
            recipe_yield=safe_float(data.get('recipe_yield'), default=None),
            apply_suggested=bool(data.get('apply_suggested')),
        )
    except ServiceError as e:
        return jsonify({'error': str(e), 'field': getattr(e, 'field', None)}), 400

    result = session.breakdown().to_dict()
    result['mode'] = session.mode.value
    if session.link is not None:
        result['recipe_id'] = session.link.recipe_id
        result['batch_cost'] = session.link.batch_cost
        result['recipe_yield'] = session.link.declared_yield
    return jsonify(result)

@app.errorhandler(IngredientNotFound)
def handle_missing_ingredient(e):
    logger.warning('Dangling ingredient reference: %s', e)
    flash(str(e), 'danger')
    return redirect(url_for('recipes_list'))


# ============================================
# INITIALIZE DATABASE
# ============================================

def init_db():
    with app.app_context():
        db.create_all()


if __name__ == '__main__':
    init_db()
    # host='0.0.0.0' allows access from other devices on the network
    app.run(debug=app.config.get('DEBUG', False), host='0.0.0.0', port=5000, use_reloader=False)
