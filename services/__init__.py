"""
Services Package

Business logic modules for the café back-office.
"""

from .exceptions import (
    ServiceError,
    ValidationError,
    SubmissionInProgress,
    StoreError,
    IngredientNotFound,
    RecipeNotFound,
    InvalidIngredientStock,
    UnsupportedUnit,
)

from .cost import (
    round2,
    unit_family,
    convert_to_base,
    line_cost,
    calculate_ingredient_cost,
    aggregate_recipe_cost,
    unit_cost_from_yield,
)

from .pricing import (
    PriceBreakdown,
    CostMode,
    RecipeLinkState,
    ProductCostSession,
    get_margin_preset,
    price_product,
)

from .store import RecordStore

from .recipes import (
    DraftLine,
    RecipeDraft,
    save_recipe,
    delete_recipe,
)

from .catalog import (
    save_category,
    delete_category,
    validate_ingredient,
    save_ingredient,
    delete_ingredient,
)

from .products import (
    link_recipe,
    build_session,
    save_product,
    delete_product,
)

__all__ = [
    # Exceptions
    'ServiceError',
    'ValidationError',
    'SubmissionInProgress',
    'StoreError',
    'IngredientNotFound',
    'RecipeNotFound',
    'InvalidIngredientStock',
    'UnsupportedUnit',
    # Cost
    'round2',
    'unit_family',
    'convert_to_base',
    'line_cost',
    'calculate_ingredient_cost',
    'aggregate_recipe_cost',
    'unit_cost_from_yield',
    # Pricing
    'PriceBreakdown',
    'CostMode',
    'RecipeLinkState',
    'ProductCostSession',
    'get_margin_preset',
    'price_product',
    # Store
    'RecordStore',
    # Recipes
    'DraftLine',
    'RecipeDraft',
    'save_recipe',
    'delete_recipe',
    # Catalog
    'save_category',
    'delete_category',
    'validate_ingredient',
    'save_ingredient',
    'delete_ingredient',
    # Products
    'link_recipe',
    'build_session',
    'save_product',
    'delete_product',
]
