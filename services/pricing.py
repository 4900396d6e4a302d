"""
Product Pricing Service

Waste-adjusted cost, suggested sale price and profit for a product,
plus the product form session that links a recipe to a product.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum

from constants import WASTE_FACTOR, TARGET_MARGIN_PRESETS, DEFAULT_MARGIN_PRESET
from .cost import round2, to_decimal, unit_cost_from_yield
from .exceptions import ValidationError, SubmissionInProgress

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PriceBreakdown:
    """Result of pricing a product at a given margin and chosen price."""
    manufacturing_cost: float
    target_margin: float
    waste_cost: float
    total_cost: float
    suggested_price: float
    chosen_price: float
    profit: float

    @property
    def is_loss(self):
        return self.profit < 0

    def to_dict(self):
        return {
            'manufacturing_cost': self.manufacturing_cost,
            'target_margin': self.target_margin,
            'waste_cost': self.waste_cost,
            'total_cost': self.total_cost,
            'suggested_price': self.suggested_price,
            'chosen_price': self.chosen_price,
            'profit': self.profit,
            'is_loss': self.is_loss,
        }


def _finite(value, field, label):
    """Coerce a form number to float; None and '' become 0, NaN and infinities are rejected."""
    try:
        value = float(value or 0.0)
    except (TypeError, ValueError):
        raise ValidationError(f'{label} must be a number', field=field) from None
    if not math.isfinite(value):
        raise ValidationError(f'{label} must be a finite number', field=field)
    return value


def get_margin_preset(title):
    """Return the margin percentage for a preset title, or raise ValidationError."""
    try:
        return TARGET_MARGIN_PRESETS[title]
    except KeyError:
        raise ValidationError(f'Unknown margin preset: {title}', field='margin') from None


def price_product(manufacturing_cost, target_margin_percent, chosen_price=0.0):
    """
    Price a product from its unit manufacturing cost.

    waste_cost      = 5% of the manufacturing cost
    total_cost      = manufacturing cost + waste
    suggested_price = total_cost / (margin / 100), or 0 without margin or cost
    profit          = chosen_price - total_cost (negative means a loss)

    Every step is rounded to 2 decimals, half away from zero.

    Args:
        manufacturing_cost: Cost to produce one unit
        target_margin_percent: Desired cost-to-price ratio in percent (e.g. 30)
        chosen_price: Sale price actually set on the product

    Returns:
        PriceBreakdown
    """
    cost = to_decimal(manufacturing_cost)
    waste_cost = round2(cost * to_decimal(WASTE_FACTOR))
    total_cost = round2(cost + to_decimal(waste_cost))

    margin = to_decimal(target_margin_percent)
    if margin > 0 and total_cost > 0:
        suggested_price = round2(to_decimal(total_cost) / (margin / 100))
    else:
        suggested_price = 0.0

    profit = round2(to_decimal(chosen_price) - to_decimal(total_cost))

    return PriceBreakdown(
        manufacturing_cost=round2(cost),
        target_margin=float(margin),
        waste_cost=waste_cost,
        total_cost=total_cost,
        suggested_price=suggested_price,
        chosen_price=round2(chosen_price),
        profit=profit,
    )


class CostMode(str, Enum):
    """How a product's manufacturing cost is entered."""
    MANUAL = 'manual_cost'
    RECIPE_LINKED = 'recipe_linked'


@dataclass
class RecipeLinkState:
    """Recipe selected on a product form; lives only as long as the form."""
    recipe_id: int
    batch_cost: float
    declared_yield: float = 1

    @property
    def unit_cost(self):
        return unit_cost_from_yield(self.batch_cost, self.declared_yield)


class ProductCostSession:
    """
    Transient state of one product form.

    Starts in MANUAL mode, for new and edited products alike: the recipe
    link is never persisted, so an edited product comes back unlinked.
    Linking a recipe switches to RECIPE_LINKED, where the manufacturing
    cost is derived as batch_cost / yield and cannot be typed in.
    """

    def __init__(self, manufacturing_cost=0.0, price=0.0, margin_title=DEFAULT_MARGIN_PRESET):
        self.mode = CostMode.MANUAL
        self.link = None
        self._manual_cost = _finite(manufacturing_cost, 'manufacturing_cost', 'Manufacturing cost')
        self.price = _finite(price, 'price', 'Price')
        self.margin_title = margin_title
        self.margin = get_margin_preset(margin_title)
        self.submitting = False

    @classmethod
    def for_product(cls, product):
        """Open a session on an existing product (always unlinked)."""
        return cls(manufacturing_cost=product.manufacturing_cost, price=product.price)

    @property
    def manufacturing_cost(self):
        if self.mode is CostMode.RECIPE_LINKED:
            return self.link.unit_cost
        return self._manual_cost

    def link_recipe(self, recipe_id, batch_cost):
        """Select a recipe: capture its current batch cost and reset the yield to 1."""
        self.link = RecipeLinkState(recipe_id=recipe_id, batch_cost=float(batch_cost or 0.0))
        self.mode = CostMode.RECIPE_LINKED
        logger.debug('Product form linked to recipe %s (batch cost %.2f)', recipe_id, self.link.batch_cost)

    def set_yield(self, declared_yield):
        if self.mode is not CostMode.RECIPE_LINKED:
            raise ValidationError('Select a recipe before setting its yield', field='recipe_yield')
        if declared_yield is not None:
            declared_yield = _finite(declared_yield, 'recipe_yield', 'Recipe yield')
        self.link.declared_yield = declared_yield

    def set_manual_cost(self, cost):
        if self.mode is CostMode.RECIPE_LINKED:
            raise ValidationError('Manufacturing cost comes from the linked recipe', field='manufacturing_cost')
        self._manual_cost = _finite(cost, 'manufacturing_cost', 'Manufacturing cost')

    def clear_recipe(self):
        """Drop the recipe link and go back to a manual cost of 0."""
        self.link = None
        self.mode = CostMode.MANUAL
        self._manual_cost = 0.0

    def select_margin(self, title):
        self.margin = get_margin_preset(title)
        self.margin_title = title

    def set_price(self, price):
        self.price = _finite(price, 'price', 'Price')

    def breakdown(self):
        return price_product(self.manufacturing_cost, self.margin, self.price)

    def apply_suggested_price(self):
        """Copy the suggested price into the chosen price and return it."""
        suggested = self.breakdown().suggested_price
        if suggested:
            self.price = suggested
        return self.price

    def begin_submit(self):
        if self.submitting:
            raise SubmissionInProgress()
        self.submitting = True

    def end_submit(self):
        self.submitting = False
