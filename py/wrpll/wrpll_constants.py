
__all__ = ('Hz', 'kHz', 'MHz', 'LC_FREQ', 'LC_FREQ_2K', 'FREQ2K_SCALE',
           'P_MIN', 'P_MAX', 'P_INC', 'REF_MIN', 'REF_MAX', 'VCO_MIN',
           'VCO_MAX', 'R2_MIN', 'R2_MAX', 'BYPASS_FREQ2K', 'BYPASS_P',
           'BYPASS_N2', 'BYPASS_R2', 'PPM', 'n2_range', 'R2_RANGE', 'P_RANGE')

# Frequencies given to the planner are integers in Hz.  Internal PLL
# frequencies (LC, Ref, VCO) are in MHz.
Hz = 1
kHz = 1000 * Hz
MHz = 1000 * kHz

# The LC PLL feeding the WRPLL, in MHz.
LC_FREQ = 2700

# Output frequencies get compared in units of 100Hz ("freq2k").  In those
# units, the output is LC_FREQ_2K * N2 / (P * R2).
LC_FREQ_2K = LC_FREQ * 2000
FREQ2K_SCALE = 100 * Hz

# Post divider.
P_MIN = 2
P_MAX = 64
P_INC = 2

# Ranges for good PLL behaviour, in MHz.  Ref = LC_FREQ / R and VCO = N * Ref.
REF_MIN = 48
REF_MAX = 400
VCO_MIN = 2400
VCO_MAX = 4800

# R2 = 2 * R.  We need REF_MAX * R2 > 2 * LC_FREQ and
# REF_MIN * R2 < 2 * LC_FREQ.
R2_MIN = LC_FREQ * 2 // REF_MAX + 1
R2_MAX = LC_FREQ * 2 // REF_MIN

# 540MHz bypasses the WRPLL entirely, with the LC PLL passed straight through.
BYPASS_FREQ2K = 5_400_000
BYPASS_P = 1
BYPASS_N2 = 2
BYPASS_R2 = 2

# Budgets are in ppm.
PPM = 1_000_000

def n2_range(r2: int) -> range:
    '''Legal N2 values for a given R2.

    VCO = N * LC_FREQ / R, so with N2 = 2 * N we need VCO_MAX * R2 > N2 *
    LC_FREQ and VCO_MIN * R2 < N2 * LC_FREQ.'''
    return range(VCO_MIN * r2 // LC_FREQ + 1, VCO_MAX * r2 // LC_FREQ + 1)

R2_RANGE = range(R2_MIN, R2_MAX + 1)
P_RANGE = range(P_MIN, P_MAX + 1, P_INC)

def test_ranges() -> None:
    assert R2_RANGE[0] == 14
    assert R2_RANGE[-1] == 112
    assert list(n2_range(14)) == list(range(13, 25))
    assert len(P_RANGE) == 32
    for r2 in R2_RANGE:
        assert len(n2_range(r2)) != 0
