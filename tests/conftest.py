from __future__ import annotations

from copy import deepcopy

import pytest

from codcalc.defaults import DEFAULTS
from codcalc.schema import migrate_assumptions


@pytest.fixture
def base_inputs() -> dict:
    inputs, _, _ = migrate_assumptions(deepcopy(DEFAULTS))
    return inputs


@pytest.fixture
def single_day_inputs(base_inputs) -> dict:
    """One day of 150 daily spend: 10 leads, 5 orders, 4 delivered, 1 returned."""
    inputs = deepcopy(base_inputs)
    inputs.update({"budget_type": "daily", "ad_spend_input": 150.0, "budget_duration": 1})
    return inputs
