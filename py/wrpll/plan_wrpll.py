'''Divider planning for the Haswell WRPLL.'''

from __future__ import annotations

from .plan_tools import fail
from .wrpll_budget import budget_for
from .wrpll_constants import *

from dataclasses import dataclass
from fractions import Fraction
from typing import Tuple

__all__ = 'WRPLLPlan', 'compute_dividers', 'prefer', 'wrpll_plan'

# (p, n2, r2)
Dividers = Tuple[int, int, int]

def freq_diff(freq2k: int, p: int, n2: int, r2: int) -> int:
    '''Error of the output, scaled by p * r2 to keep it integral.

    The output is LC_FREQ_2K * n2 / (p * r2) in freq2k units.'''
    return abs(freq2k * p * r2 - LC_FREQ_2K * n2)

def prefer(freq2k: int, budget: int, candidate: Dividers,
           best: Dividers | None) -> bool:
    '''Return True if candidate should replace best.

    The relative error is diff / (freq2k * p * r2), and we want that times a
    million to be within budget.  If the best so far is outside the budget,
    always prefer to improve upon it.  If both are within the budget, maximise
    Ref * VCO, that is n2 / (p * r2 * r2) with p cancelling out of the
    comparison.'''
    if best is None:
        return True
    p, n2, r2 = candidate
    best_p, best_n2, best_r2 = best
    diff = freq_diff(freq2k, p, n2, r2)
    best_diff = freq_diff(freq2k, best_p, best_n2, best_r2)
    ok = freq2k * budget * p * r2 >= PPM * diff
    best_ok = freq2k * budget * best_p * best_r2 >= PPM * best_diff

    if ok and best_ok:
        return n2 * best_r2 * best_r2 > best_n2 * r2 * r2
    if ok:
        return True
    if best_ok:
        return False
    # Both outside the budget, pick the closer.
    return best_p * best_r2 * diff < p * r2 * best_diff

@dataclass
class WRPLLPlan:
    # Requested output frequency, in Hz.
    freq: int
    # Post divider.
    p: int = 0
    # Twice the feedback divider.
    n2: int = 0
    # Twice the reference divider.
    r2: int = 0

    def __lt__(self, b: WRPLLPlan | None) -> bool:
        '''Less is better.  I.e., return True if self is better than b.'''
        if b is None:
            return True
        assert self.freq == b.freq
        return prefer(self.freq2k(), self.budget(),
                      (self.p, self.n2, self.r2), (b.p, b.n2, b.r2))

    def freq2k(self) -> int:
        return self.freq // FREQ2K_SCALE

    def budget(self) -> int:
        return budget_for(self.freq)

    def dividers(self) -> Tuple[int, int, int]:
        '''The (R2, N2, P) triple.'''
        return self.r2, self.n2, self.p

    def is_bypass(self) -> bool:
        return (self.p, self.n2, self.r2) == (BYPASS_P, BYPASS_N2, BYPASS_R2)

    def ref(self) -> Fraction:
        '''Reference frequency seen by the WRPLL, in MHz.'''
        return Fraction(2 * LC_FREQ, self.r2)

    def vco(self) -> Fraction:
        '''VCO frequency, in MHz.'''
        return Fraction(LC_FREQ * self.n2, self.r2)

    def output(self) -> Fraction:
        '''Actual output frequency, in Hz.'''
        return Fraction(LC_FREQ_2K * self.n2 * FREQ2K_SCALE, self.p * self.r2)

    def error(self) -> Fraction:
        return self.output() - self.freq

    def error_ppm(self) -> float:
        if not self.freq:
            return float('inf')
        return float(self.error() / self.freq * PPM)

    def diff(self) -> int:
        return freq_diff(self.freq2k(), self.p, self.n2, self.r2)

    def within_budget(self) -> bool:
        return self.freq2k() * self.budget() * self.p * self.r2 \
            >= PPM * self.diff()

    def validate(self) -> None:
        if self.is_bypass():
            assert self.freq2k() == BYPASS_FREQ2K
            return
        assert self.p in P_RANGE
        assert self.r2 in R2_RANGE
        assert self.n2 in n2_range(self.r2)
        assert REF_MIN <= self.ref() <= REF_MAX
        assert VCO_MIN < self.vco() <= VCO_MAX

def wrpll_plan(freq: int) -> WRPLLPlan:
    '''Search all legal (r2, n2, p) for the best way to generate freq Hz.

    This is a fold of prefer() over the candidates in order of ascending r2,
    n2 and p.  The best-so-far terms of the comparison only change when the
    best does, so they are kept out of the inner loop.'''
    if freq < 0:
        fail(f'Negative frequency {freq}')

    freq2k = freq // FREQ2K_SCALE
    if freq2k == BYPASS_FREQ2K:
        return WRPLLPlan(freq, p=BYPASS_P, n2=BYPASS_N2, r2=BYPASS_R2)

    budget = budget_for(freq)
    scaled_budget = freq2k * budget

    best_p = best_n2 = best_r2 = 0
    best_pr = best_diff = best_r2_sq = 0
    best_ok = False
    for r2 in R2_RANGE:
        r2_sq = r2 * r2
        for n2 in n2_range(r2):
            target = LC_FREQ_2K * n2
            for p in P_RANGE:
                pr = p * r2
                actual = freq2k * pr
                diff = actual - target if actual >= target else target - actual
                ok = scaled_budget * pr >= PPM * diff
                if best_p:
                    if ok:
                        if best_ok and n2 * best_r2_sq <= best_n2 * r2_sq:
                            continue
                    elif best_ok or best_pr * diff >= pr * best_diff:
                        continue
                best_p, best_n2, best_r2 = p, n2, r2
                best_pr, best_diff, best_ok = pr, diff, ok
                best_r2_sq = r2_sq

    if not best_p:
        fail(f'No WRPLL dividers for {freq} Hz')

    return WRPLLPlan(freq, p=best_p, n2=best_n2, r2=best_r2)

def compute_dividers(freq: int) -> Tuple[int, int, int]:
    '''Return (R2, N2, P) for freq Hz.'''
    return wrpll_plan(freq).dividers()

def naive_plan(freq: int) -> WRPLLPlan:
    best = None
    for r2 in R2_RANGE:
        for n2 in n2_range(r2):
            for p in P_RANGE:
                plan = WRPLLPlan(freq, p=p, n2=n2, r2=r2)
                if plan < best:
                    best = plan
    assert best is not None
    return best

def test_bypass() -> None:
    assert compute_dividers(540_000_000) == (2, 2, 1)
    # Only freq2k matters.
    assert compute_dividers(540_000_099) == (2, 2, 1)
    plan = wrpll_plan(540_000_000)
    assert plan.is_bypass()
    assert plan.output() == 540_000_000
    plan.validate()

def test_deterministic() -> None:
    for f in 19750000, 108108000, 235000000:
        assert compute_dividers(f) == compute_dividers(f)

def test_exact() -> None:
    # Budget zero frequencies that are a whole ratio of the LC PLL.  The 1.001
    # variants alongside them can't be hit exactly.
    for f in 25200000, 27000000, 37800000, 40500000, 54000000, 59400000, \
            72000000, 74250000, 81000000, 89100000, 108000000, 111375000, \
            148500000, 162000000, 222750000, 297000000:
        assert budget_for(f) == 0
        plan = wrpll_plan(f)
        plan.validate()
        assert plan.diff() == 0
        assert LC_FREQ_2K * plan.n2 == plan.freq2k() * plan.p * plan.r2
        assert plan.output() == f

def test_legal() -> None:
    for f in 1000000, 25000000, 65000000, 173000000, 300000000, 600000000:
        plan = wrpll_plan(f)
        plan.validate()
        assert plan.p % 2 == 0 and 2 <= plan.p <= 64
        assert 48 <= plan.ref() <= 400
        assert 2400 < plan.vco() <= 4800

def test_matches_naive() -> None:
    # Budget 0, budget 1000 within budget, budget 4000, and out of budget.
    for f in 27000000, 65000000, 270000000, 1000000, 0:
        assert wrpll_plan(f) == naive_plan(f), f

def test_zero() -> None:
    plan = wrpll_plan(0)
    plan.validate()
    assert not plan.within_budget()

def test_negative() -> None:
    import pytest
    from .plan_tools import PlanningFailed
    with pytest.raises(PlanningFailed):
        wrpll_plan(-1)

def test_tie_break() -> None:
    # Both exact for 27MHz, so the larger n2 / r2² wins in either order.
    a = WRPLLPlan(27000000, p=30, n2=21, r2=14)
    b = WRPLLPlan(27000000, p=20, n2=15, r2=15)
    assert a.diff() == b.diff() == 0
    assert a.within_budget() and b.within_budget()
    assert a < b
    assert not b < a
    assert a < None
    # Equal is never an improvement.
    assert not a < WRPLLPlan(27000000, p=30, n2=21, r2=14)

def test_budget_beats_ratio() -> None:
    f = 27000000
    inexact = WRPLLPlan(f, p=30, n2=22, r2=14)
    exact = WRPLLPlan(f, p=20, n2=15, r2=15)
    assert not inexact.within_budget()
    assert exact < inexact
    assert not inexact < exact

def test_closer_outside_budget() -> None:
    # With a zero budget anything inexact is outside, so pick the closer.
    f = 27000001 * 100
    freq2k = f // 100
    near = 2, 1000, 100
    far = 2, 1001, 100
    assert freq_diff(freq2k, *near) < freq_diff(freq2k, *far)
    assert prefer(freq2k, 0, near, far)
    assert not prefer(freq2k, 0, far, near)
