"""Product pricing advisor and the product form session."""

from types import SimpleNamespace

import pytest

from constants import TARGET_MARGIN_PRESETS, DEFAULT_MARGIN_PRESET
from services import (
    price_product, get_margin_preset, ProductCostSession, CostMode,
    ValidationError, SubmissionInProgress,
)


def test_price_example():
    pricing = price_product(3.70, 30, 10.00)
    assert pricing.waste_cost == 0.19
    assert pricing.total_cost == 3.89
    assert pricing.suggested_price == 12.97
    assert pricing.profit == 6.11
    assert not pricing.is_loss


def test_profit_can_be_negative():
    pricing = price_product(3.70, 30, 2.00)
    assert pricing.profit == -1.89
    assert pricing.is_loss


def test_no_suggested_price_without_margin_or_cost():
    assert price_product(3.70, 0, 0).suggested_price == 0
    assert price_product(0, 30, 0).suggested_price == 0
    assert price_product(0, 30, 0).total_cost == 0


def test_accepts_any_margin():
    assert price_product(10.00, 50, 0).suggested_price == 21.00


def test_breakdown_to_dict():
    data = price_product(3.70, 30, 10.00).to_dict()
    assert data['total_cost'] == 3.89
    assert data['is_loss'] is False
    assert data['target_margin'] == 30


def test_margin_presets():
    assert list(TARGET_MARGIN_PRESETS) == [
        'Bebidas', 'Postres', 'Para picar', 'Tortas & Cakes', 'Brunch & Sandwichs',
    ]
    assert DEFAULT_MARGIN_PRESET == 'Bebidas'
    assert get_margin_preset('Tortas & Cakes') == 32


def test_unknown_margin_preset():
    with pytest.raises(ValidationError):
        get_margin_preset('Helados')


# ============================================
# PRODUCT COST SESSION
# ============================================

def test_session_starts_in_manual_mode():
    session = ProductCostSession()
    assert session.mode is CostMode.MANUAL
    assert session.manufacturing_cost == 0
    assert session.margin == 25


def test_manual_cost_is_editable():
    session = ProductCostSession()
    session.set_manual_cost(3.70)
    session.select_margin('Postres')
    session.set_price(10)
    pricing = session.breakdown()
    assert pricing.total_cost == 3.89
    assert pricing.suggested_price == 12.97
    assert pricing.profit == 6.11


def test_linking_recipe_derives_unit_cost():
    session = ProductCostSession()
    session.link_recipe(7, 10.00)
    assert session.mode is CostMode.RECIPE_LINKED
    assert session.link.declared_yield == 1
    assert session.manufacturing_cost == 10.00

    session.set_yield(4)
    assert session.manufacturing_cost == 2.50


def test_linking_another_recipe_resets_yield():
    session = ProductCostSession()
    session.link_recipe(7, 10.00)
    session.set_yield(4)
    session.link_recipe(8, 6.00)
    assert session.link.declared_yield == 1
    assert session.manufacturing_cost == 6.00


def test_zero_yield_is_clamped():
    session = ProductCostSession()
    session.link_recipe(7, 3.70)
    session.set_yield(0)
    assert session.manufacturing_cost == 3.70


def test_linked_cost_is_read_only():
    session = ProductCostSession()
    session.link_recipe(7, 10.00)
    with pytest.raises(ValidationError):
        session.set_manual_cost(1.00)


def test_yield_requires_a_linked_recipe():
    with pytest.raises(ValidationError):
        ProductCostSession().set_yield(3)


def test_clear_recipe_resets_cost():
    session = ProductCostSession(manufacturing_cost=5.00)
    session.link_recipe(7, 10.00)
    session.clear_recipe()
    assert session.mode is CostMode.MANUAL
    assert session.link is None
    assert session.manufacturing_cost == 0


def test_apply_suggested_price():
    session = ProductCostSession(manufacturing_cost=3.70, margin_title='Postres')
    assert session.apply_suggested_price() == 12.97
    assert session.price == 12.97
    assert session.breakdown().profit == 9.08


def test_apply_suggested_price_without_cost_keeps_price():
    session = ProductCostSession(price=4.00)
    assert session.apply_suggested_price() == 4.00


def test_edit_session_starts_unlinked():
    product = SimpleNamespace(manufacturing_cost=2.50, price=9.90)
    session = ProductCostSession.for_product(product)
    assert session.mode is CostMode.MANUAL
    assert session.manufacturing_cost == 2.50
    assert session.price == 9.90


def test_one_submission_at_a_time():
    session = ProductCostSession()
    session.begin_submit()
    with pytest.raises(SubmissionInProgress):
        session.begin_submit()
    session.end_submit()
    session.begin_submit()


@pytest.mark.parametrize('value', [float('nan'), float('inf'), 'nan', '-inf', 'abc'])
def test_session_rejects_non_finite_numbers(value):
    session = ProductCostSession()
    with pytest.raises(ValidationError):
        session.set_price(value)
    with pytest.raises(ValidationError):
        session.set_manual_cost(value)
    with pytest.raises(ValidationError):
        ProductCostSession(price=value)

    session.link_recipe(7, 10.00)
    with pytest.raises(ValidationError) as exc:
        session.set_yield(value)
    assert exc.value.field == 'recipe_yield'
    assert session.manufacturing_cost == 10.00
