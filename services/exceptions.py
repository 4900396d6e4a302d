"""
Service Exceptions

Exception hierarchy for the costing engine and the save sequences.

    ServiceError
    ├── ValidationError
    │   └── SubmissionInProgress
    ├── StoreError
    ├── IngredientNotFound
    ├── RecipeNotFound
    ├── InvalidIngredientStock
    └── UnsupportedUnit
"""


class ServiceError(Exception):
    """Base exception for all service layer errors."""

    pass


class ValidationError(ServiceError):
    """
    Raised when user input is incomplete or invalid.

    Blocks submission; no store call is attempted.
    """

    def __init__(self, message, field=None):
        self.field = field
        super().__init__(message)


class SubmissionInProgress(ValidationError):
    """Raised when a form session is saved again while a save is in flight."""

    def __init__(self):
        super().__init__('A save is already in progress for this form')


class StoreError(ServiceError):
    """
    Raised when a record store call fails.

    step names the save step that failed (e.g. 'insert recipe_ingredients').
    """

    def __init__(self, message, step=None):
        self.step = step
        super().__init__(message)


class IngredientNotFound(ServiceError):
    """Raised when a recipe line references an ingredient that no longer exists."""

    def __init__(self, ingredient_id):
        self.ingredient_id = ingredient_id
        super().__init__(f'Ingredient with ID {ingredient_id} not found')


class RecipeNotFound(ServiceError):
    """Raised when a recipe cannot be found by ID."""

    def __init__(self, recipe_id):
        self.recipe_id = recipe_id
        super().__init__(f'Recipe with ID {recipe_id} not found')


class InvalidIngredientStock(ServiceError):
    """Raised when an ingredient's stocked quantity cannot be used as a divisor."""

    def __init__(self, stock_quantity, ingredient_name=None):
        self.stock_quantity = stock_quantity
        self.ingredient_name = ingredient_name
        label = f'"{ingredient_name}"' if ingredient_name else 'ingredient'
        super().__init__(f'Stock quantity for {label} must be greater than 0 (got {stock_quantity!r})')


class UnsupportedUnit(ServiceError):
    """Raised in strict mode when a unit is not part of the requested family."""

    def __init__(self, unit, family=None):
        self.unit = unit
        self.family = family
        if family:
            super().__init__(f'Unit {unit!r} is not a {family} unit')
        else:
            super().__init__(f'Unknown unit {unit!r}')
