
from .wrpll_constants import Hz, kHz, MHz

from fractions import Fraction
from typing import NoReturn

class PlanningFailed(RuntimeError):
    pass

def fail(why: str) -> NoReturn:
    raise PlanningFailed(why)

def str_to_freq(s: str) -> int:
    '''Parse a frequency into integer Hz.  The default unit is MHz.'''
    s = s.lower()
    for suffix, scale in ('khz', kHz), ('mhz', MHz), \
            ('ghz', 1000 * MHz), ('hz', Hz):
        if s.endswith(suffix):
            break
        if suffix != 'hz' and s.endswith(suffix[0]):
            suffix = suffix[0]
            break
    else:
        suffix = ''
        scale = MHz

    freq = Fraction(s.removesuffix(suffix)) * scale
    if freq.denominator != 1:
        raise ValueError(f'{s} is not a whole number of Hz')
    return int(freq)

# Set the name of str_to_freq to give sensible argparse help test.
str_to_freq.__name__ = 'frequency'

FRACTIONS = {
    Fraction(0): '',
    Fraction(1, 3): '⅓',
    Fraction(2, 3): '⅔',
    Fraction(1, 6): '⅙',
    Fraction(5, 6): '⅚',
    Fraction(1, 7): '⅐',
    Fraction(1, 9): '⅑',
}

def freq_to_str(freq: Fraction|int, precision: int = 0) -> str:
    '''Format a frequency in Hz.'''
    if freq >= 1000 * MHz:
        scaled = Fraction(freq, 1000 * MHz)
        suffix = 'GHz'
    elif freq >= MHz:
        scaled = Fraction(freq, MHz)
        suffix = 'MHz'
    elif freq >= kHz:
        scaled = Fraction(freq, kHz)
        suffix = 'kHz'
    else:
        scaled = Fraction(freq)
        suffix = 'Hz'

    rounded = round(scaled)
    fract = scaled % 1
    fract_str = None
    if fract in FRACTIONS:
        fract_str = FRACTIONS[fract]

    elif fract.denominator in (6, 7, 9) or 11 <= fract.denominator <= 19:
        fract_str = f'+{fract}'

    elif rounded != scaled and rounded != 0 and abs(rounded - scaled) < 1e-5:
        if rounded < scaled:
            fract_str = f' + {float(scaled - rounded):.6g}'
        else:
            fract_str = f' - {float(rounded - scaled):.6g}'
        scaled = rounded

    if fract_str is not None:
        return f'{int(scaled)}{fract_str} {suffix}'
    elif precision == 0:
        return f'{float(scaled)} {suffix}'
    else:
        return f'{float(scaled):.{precision}g} {suffix}'

def fraction_to_str(f: Fraction, paren: bool = True) -> str:
    if f.denominator == 1 or f < 1:
        return str(f)
    d = f.denominator
    i = f.numerator // d
    n = f.numerator % d
    if paren:
        return f'({i} + {n}/{d})'
    else:
        return f'{i} + {n}/{d}'

def test_str_to_freq() -> None:
    assert str_to_freq('148.5') == 148500000
    assert str_to_freq('148.5MHz') == 148500000
    assert str_to_freq('148.5m') == 148500000
    assert str_to_freq('27027k') == 27027000
    assert str_to_freq('25175kHz') == 25175000
    assert str_to_freq('19750000Hz') == 19750000
    assert str_to_freq('0.54GHz') == 540000000
    assert str_to_freq('297/2') == 148500000

def test_str_to_freq_fractional_hz() -> None:
    import pytest
    with pytest.raises(ValueError):
        str_to_freq('1.5Hz')
    with pytest.raises(ValueError):
        str_to_freq('bogus')

def test_freq_to_str() -> None:
    assert freq_to_str(27000000) == '27 MHz'
    assert freq_to_str(148352000) == '148.352 MHz'
    assert freq_to_str(540000000) == '540 MHz'
    assert freq_to_str(Fraction(1000000, 3)) == '333⅓ kHz'
    assert freq_to_str(Fraction(2000000000, 3)) == '666⅔ MHz'
    assert freq_to_str(12) == '12 Hz'
    assert freq_to_str(Fraction(-1, 4), 4) == '-0.25 Hz'

def test_fraction_to_str() -> None:
    assert fraction_to_str(Fraction(5400, 14)) == '(385 + 5/7)'
    assert fraction_to_str(Fraction(5400, 14), False) == '385 + 5/7'
    assert fraction_to_str(Fraction(400)) == '400'
