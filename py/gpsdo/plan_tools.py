from .plan_constants import REGISTER_MAX

import re

from fractions import Fraction
from math import lcm

__all__ = 'checked_u32', 'fract_lcm', 'freq_to_str', 'is_multiple_of', \
    'str_to_freq'

def is_multiple_of(a: Fraction, b: Fraction) -> bool:
    if not b:
        return False
    return a.numerator % b.numerator == 0 and \
        b.denominator % a.denominator == 0

def fract_lcm(a: Fraction, b: Fraction) -> Fraction:
    '''Least common multiple of two positive fractions.  The denominator is
    the LCM of the denominators, and the numerator the LCM of the numerators
    scaled to that denominator.'''
    assert a > 0 and b > 0
    den = lcm(a.denominator, b.denominator)
    num = lcm(a.numerator * (den // a.denominator),
              b.numerator * (den // b.denominator))
    result = Fraction(num, den)
    assert is_multiple_of(result, a) and is_multiple_of(result, b)
    return result

def checked_u32(name: str, value: int) -> int:
    '''Check that value fits the 32 bit register it is destined for.'''
    if not 0 <= value <= REGISTER_MAX:
        raise OverflowError(f'{name} = {value} does not fit in 32 bits')
    return value

FREQ_RE = re.compile(r'(?:(\d+)[ _])?(\d+)/(\d+)|(\d+(?:\.\d*)?|\.\d+)')

def str_to_freq(s: str) -> Fraction:
    '''Parse a frequency in Hz.  Accepts integers, decimals, fractions (500/9)
    and mixed numbers (10_1/7 or "10 1/7"), with an optional k or M unit and
    an optional trailing Hz.'''
    text = s.strip()
    if text.lower().endswith('hz'):
        text = text[:-2]
    scale = 1
    if text.endswith('k'):
        scale = 1000
        text = text[:-1]
    elif text.endswith('M'):
        scale = 1000_000
        text = text[:-1]

    match = FREQ_RE.fullmatch(text)
    if match is None:
        raise ValueError(f'Invalid frequency: {s!r}')
    whole, num, den, decimal = match.groups()
    if decimal is not None:
        value = Fraction(decimal)
    elif int(den) == 0:
        raise ValueError(f'Zero denominator in frequency: {s!r}')
    else:
        value = int(whole or 0) + Fraction(int(num), int(den))

    value *= scale
    if value <= 0:
        raise ValueError(f'Frequency must be positive: {s!r}')
    return value

# Set the name of str_to_freq to give sensible argparse help test.
str_to_freq.__name__ = 'frequency'

FRACTIONS = {
    Fraction(1, 2): '½',
    Fraction(1, 3): '⅓',
    Fraction(2, 3): '⅔',
    Fraction(1, 4): '¼',
    Fraction(3, 4): '¾',
    Fraction(1, 6): '⅙',
    Fraction(5, 6): '⅚',
    Fraction(1, 7): '⅐',
    Fraction(1, 9): '⅑',
}

def freq_to_str(freq: Fraction | int, precision: int = 10) -> str:
    if freq >= 1000_000_000:
        scaled = Fraction(freq, 1000_000_000)
        suffix = 'GHz'
    elif freq >= 1000_000:
        scaled = Fraction(freq, 1000_000)
        suffix = 'MHz'
    elif freq >= 1000:
        scaled = Fraction(freq, 1000)
        suffix = 'kHz'
    else:
        scaled = Fraction(freq)
        suffix = 'Hz'

    whole = scaled.numerator // scaled.denominator
    fract = scaled - whole
    if not fract:
        return f'{whole} {suffix}'
    if fract in FRACTIONS:
        return f'{whole}{FRACTIONS[fract]} {suffix}'
    if fract.denominator < 20:
        return f'{whole}+{fract} {suffix}'
    return f'{float(scaled):.{precision}g} {suffix}'

def test_fract_lcm() -> None:
    assert fract_lcm(Fraction(123431, 100), Fraction(5432)) == 95782456
    assert fract_lcm(Fraction(3), Fraction(4)) == 12
    assert fract_lcm(Fraction(1, 2), Fraction(1, 3)) == 1
    assert fract_lcm(Fraction(3, 4), Fraction(5, 6)) == Fraction(15, 2)
    assert fract_lcm(Fraction(10), Fraction(10)) == 10

    L2 = [Fraction(2) ** i for i in range(-3, 4)]
    L3 = [Fraction(3) ** i for i in range(-3, 4)]
    L5 = [Fraction(5) ** i for i in range(-2, 3)]
    fracts = [a * b * c for a in L2 for b in L3 for c in L5]
    for a in fracts[::7]:
        for b in fracts:
            # fract_lcm asserts that both divide the result.
            m = fract_lcm(a, b)
            assert m == fract_lcm(b, a)
            assert m >= max(a, b)

def test_is_multiple_of() -> None:
    assert is_multiple_of(Fraction(10), Fraction(5, 2))
    assert not is_multiple_of(Fraction(10), Fraction(3))
    assert not is_multiple_of(Fraction(10), Fraction(0))

def test_checked_u32() -> None:
    assert checked_u32('x', 0) == 0
    assert checked_u32('x', REGISTER_MAX) == REGISTER_MAX
    for bad in -1, REGISTER_MAX + 1:
        try:
            checked_u32('x', bad)
        except OverflowError:
            pass
        else:
            assert False, bad

def test_str_to_freq() -> None:
    assert str_to_freq('1000') == 1000
    assert str_to_freq('1234.31') == Fraction(123431, 100)
    assert str_to_freq('10M') == 10_000_000
    assert str_to_freq('96k') == 96_000
    assert str_to_freq('500/9k') == Fraction(500_000, 9)
    assert str_to_freq('10_1/7k') == Fraction(70_000 + 1000, 7)
    assert str_to_freq('10 1/7') == Fraction(71, 7)
    assert str_to_freq('2.5kHz') == 2500
    assert str_to_freq('.5') == Fraction(1, 2)
    assert str_to_freq(' 100MHz ') == 100_000_000

def test_str_to_freq_bad() -> None:
    for bad in '', 'M', '1.2.3', '1_2.5', '1/2/3', '1/0', '10kk', '10G', \
            '1_2', '0', '0/5', '-5', 'abc', '1.5/2', '10 k':
        try:
            str_to_freq(bad)
        except ValueError:
            pass
        else:
            assert False, bad

def test_freq_to_str() -> None:
    assert freq_to_str(1000) == '1 kHz'
    assert freq_to_str(5432) == '5.432 kHz'
    assert freq_to_str(Fraction(123431, 100)) == '1.23431 kHz'
    assert freq_to_str(10_000_000) == '10 MHz'
    assert freq_to_str(Fraction(21, 2)) == '10½ Hz'
    assert freq_to_str(Fraction(71, 7)) == '10⅐ Hz'
    assert freq_to_str(Fraction(9000, 7)) == '1+2/7 kHz'
    assert freq_to_str(5_000_000_000) == '5 GHz'
