'''Accuracy budgets, in ppm, for WRPLL output frequencies.'''

__all__ = 'BUDGETS', 'DEFAULT_BUDGET', 'budget_for'

# Frequencies that are exact rational multiples of the LC PLL.  These must be
# hit exactly.
EXACT = (
    25175000, 25200000, 27000000, 27027000, 37762500, 37800000, 40500000,
    40541000, 54000000, 54054000, 59341000, 59400000, 72000000, 74176000,
    74250000, 81000000, 81081000, 89012000, 89100000, 108000000, 108108000,
    111264000, 111375000, 148352000, 148500000, 162000000, 162162000,
    222525000, 222750000, 296703000, 297000000)

# Commonly used modes that can't be hit exactly, by allowed error.
BUDGET_1500 = 233500000, 245250000, 247750000, 253250000, 298000000

BUDGET_2000 = 169128000, 169500000, 179500000, 202000000

BUDGET_4000 = (
    256250000, 262500000, 270000000, 272500000, 273750000, 280750000,
    281250000, 286000000, 291750000)

BUDGET_5000 = 267250000, 268500000

DEFAULT_BUDGET = 1000

BUDGETS = {
    freq: ppm for ppm, freqs in ((0, EXACT), (1500, BUDGET_1500),
                                 (2000, BUDGET_2000), (4000, BUDGET_4000),
                                 (5000, BUDGET_5000))
    for freq in freqs}

# The sets must be disjoint.
assert len(BUDGETS) == len(EXACT) + len(BUDGET_1500) + len(BUDGET_2000) \
    + len(BUDGET_4000) + len(BUDGET_5000)

def budget_for(freq: int) -> int:
    return BUDGETS.get(freq, DEFAULT_BUDGET)

def test_budgets() -> None:
    assert budget_for(27000000) == 0
    assert budget_for(297000000) == 0
    assert budget_for(233500000) == 1500
    assert budget_for(202000000) == 2000
    assert budget_for(270000000) == 4000
    assert budget_for(268500000) == 5000
    assert len(BUDGETS) == 51

def test_default_budget() -> None:
    for f in 0, 19750000, 27000001, 540000000, 1 << 40:
        assert budget_for(f) == DEFAULT_BUDGET
    # Membership is exact, not a range.
    assert budget_for(148500000 + 1) == 1000
    assert budget_for(148500000 - 1) == 1000
