'''Divider planning for the Si53xx in a GPS disciplined oscillator.

The Si53xx generates both outputs from one VCO:

            fOSC             |  N1_HS  = [4, 5, ..., 11]
   fn = --------------       |  NCn_LS = [2, 4, 6, ..., 2**20]
        N1_HS * NCn_LS

and locks the VCO to the GPS module output via the phase detector:

   f3 = fGPS / N31,   fOSC = f3 * N2_HS * N2_LS

We search for divider settings giving both targets exactly.  Solutions are
ranked by f3, a higher phase detector frequency giving less jitter.'''

from __future__ import annotations

from .primes import largest_factor
from .plan_constants import *
from .plan_tools import checked_u32, fract_lcm, is_multiple_of

from dataclasses import dataclass
from enum import IntEnum
from fractions import Fraction
from math import ceil, floor
from typing import Generator

__all__ = 'Find', 'HardwareLimits', 'Solution', 'DEFAULT_LIMITS', \
    'candidates', 'solve'

class Find(IntEnum):
    '''How hard to search.  The ordering matters, we stop once the quality
    of what we have found reaches the requested level.'''
    ANY = 0                             # First legal solution.
    GOOD = 1                            # f3 at least half the maximum.
    BEST = 2                            # f3 at the maximum.
    ALL = 3                             # Everything, sorted.

@dataclass(frozen=True)
class HardwareLimits:
    vco_lo: int = VCO_LO
    vco_hi: int = VCO_HI
    f3_lo: int = F3_LO
    f3_hi: int = F3_HI
    gps_hi: int = GPS_HI

DEFAULT_LIMITS = HardwareLimits()

@dataclass(frozen=True)
class Solution:
    fGPS: int
    N31: int
    N1_HS: int
    NC1_LS: int
    NC2_LS: int
    N2_HS: int
    N2_LS: int

    def __post_init__(self) -> None:
        for name, value in self.fields():
            checked_u32(name, value)

    def fields(self) -> list[tuple[str, int]]:
        return [('fGPS', self.fGPS), ('N31', self.N31),
                ('N1_HS', self.N1_HS), ('NC1_LS', self.NC1_LS),
                ('NC2_LS', self.NC2_LS), ('N2_HS', self.N2_HS),
                ('N2_LS', self.N2_LS)]

    @property
    def f3(self) -> Fraction:
        return Fraction(self.fGPS, self.N31)

    @property
    def fOSC(self) -> Fraction:
        return self.f3 * self.N2_HS * self.N2_LS

    @property
    def f1(self) -> Fraction:
        return self.fOSC / (self.N1_HS * self.NC1_LS)

    @property
    def f2(self) -> Fraction:
        return self.fOSC / (self.N1_HS * self.NC2_LS)

    def __lt__(self, b: Solution | None) -> bool:
        '''Less is better.  I.e., return True if self is better than b.'''
        if b is None:
            return True
        return self.f3 > b.f3

    def quality(self, limits: HardwareLimits) -> Find:
        '''How close f3 is to the most this N31 allows.  The thresholds are
        empirical.'''
        f3r = self.N31 * limits.f3_hi
        if f3r == self.fGPS:
            return Find.BEST
        if f3r <= 2 * self.fGPS:
            return Find.GOOD
        return Find.ANY

    def validate(self, f1: Fraction, f2: Fraction,
                 limits: HardwareLimits) -> None:
        assert self.f1 == f1, f'f1 {self.f1} != {f1}'
        assert self.f2 == f2, f'f2 {self.f2} != {f2}'
        assert limits.f3_lo <= self.f3 <= limits.f3_hi
        assert limits.vco_lo <= self.fOSC <= limits.vco_hi
        assert is_in_ncx_ls_range(self.NC1_LS)
        assert is_in_ncx_ls_range(self.NC2_LS)
        assert self.N2_LS % 2 == 0 and self.N2_LS <= N2_LS_MAX
        assert self.N31 <= N31_MAX

def is_in_ncx_ls_range(n: int) -> bool:
    # The Si53xx documentation allows n = 1, but it is an undocumented
    # "feature" that n = 1 doesn't work in CMOS mode, which is what drives
    # the GPS reference.  See https://github.com/simontheu/lb-gps-linux/issues/4
    return 0 < n <= NCN_LS_MAX and n % 2 == 0

def output_lcm(f1: Fraction, f2: Fraction) -> Fraction:
    '''The LCM of the two outputs, doubled if needed so that it is an even
    multiple of both.'''
    f_lcm = fract_lcm(f1, f2)
    if (f_lcm / f1) % 2 != 0 or (f_lcm / f2) % 2 != 0:
        f_lcm *= 2
    return f_lcm

def candidates(f1: Fraction, f2: Fraction, limits: HardwareLimits) \
        -> Generator[Solution]:
    '''Generate all the legal solutions, in search order.'''
    f_lcm = output_lcm(f1, f2)
    assert is_multiple_of(f_lcm, f1) and is_multiple_of(f_lcm, f2)

    # NC1_LS and NC2_LS are multiples of these:  NCn_LS = q * fn_div
    f1_div = int(f_lcm / f1)
    f2_div = int(f_lcm / f2)
    q_max = NCN_LS_MAX // max(f1_div, f2_div)

    fOSC_seen: set[Fraction] = set()

    for N1_HS in N1_HS_VALUES:
        # fOSC = fLCM * N1_HS * q, and the VCO limits then bound q.
        fN1 = N1_HS * f_lcm
        q_lo = max(1, ceil(limits.vco_lo / fN1))
        q_hi = min(q_max, floor(limits.vco_hi / fN1))

        for q in range(q_lo, q_hi + 1):
            NC1_LS = q * f1_div
            NC2_LS = q * f2_div
            assert is_in_ncx_ls_range(NC1_LS)
            assert is_in_ncx_ls_range(NC2_LS)

            fOSC = fN1 * q
            if fOSC in fOSC_seen:
                continue
            fOSC_seen.add(fOSC)

            yield from feedback_candidates(
                fOSC, N1_HS, NC1_LS, NC2_LS, limits)

def feedback_candidates(fOSC: Fraction, N1_HS: int, NC1_LS: int, NC2_LS: int,
                        limits: HardwareLimits) -> Generator[Solution]:
    '''Find the feedback dividers locking a particular VCO frequency to the
    GPS module.'''
    # Try N2_HS values giving small denominators for fOSC / N2_HS first.
    # That minimises N31, keeping f3 as high as possible.  The sort is stable
    # so ties keep the larger, lower power, dividers first.
    for N2_HS in sorted(N2_HS_VALUES, key=lambda n: (fOSC / n).denominator):
        f3_N2 = fOSC / (2 * N2_HS)
        N31 = f3_N2.denominator
        if N31 > N31_MAX:
            continue

        gps_hi = min(limits.gps_hi, N31 * limits.f3_hi)
        N2_LS = 2
        fGPS = f3_N2.numerator
        if fGPS > gps_hi:
            # Move as small a factor as possible over to N2_LS.
            fGPS = largest_factor(f3_N2.numerator, gps_hi)
            N2_LS *= f3_N2.numerator // fGPS

        if N2_LS > N2_LS_MAX or Fraction(fGPS, N31) < limits.f3_lo:
            continue

        yield Solution(fGPS = fGPS, N31 = N31, N1_HS = N1_HS,
                       NC1_LS = NC1_LS, NC2_LS = NC2_LS,
                       N2_HS = N2_HS, N2_LS = N2_LS)

def solve(f1: Fraction, f2: Fraction,
          limits: HardwareLimits = DEFAULT_LIMITS,
          algorithm: Find = Find.GOOD) -> list[Solution]:
    '''Find divider settings giving exactly f1 and f2 on the two outputs.

    For Find.ALL, return every solution, best first.  Otherwise return the
    best solution seen by the time the search reaches the requested quality,
    or when it runs out.  An empty list means that there is no solution.'''
    assert f1 > 0 and f2 > 0
    f1 = Fraction(f1)
    f2 = Fraction(f2)

    if algorithm == Find.ALL:
        solutions = list(candidates(f1, f2, limits))
        for sol in solutions:
            sol.validate(f1, f2, limits)
        solutions.sort()
        return solutions

    best = None
    found = None
    for sol in candidates(f1, f2, limits):
        sol.validate(f1, f2, limits)
        if sol < best:
            best = sol
        quality = sol.quality(limits)
        if found is None or quality > found:
            found = quality
        if found >= algorithm:
            break

    return [] if best is None else [best]

def test_basic() -> None:
    f1 = Fraction(123431, 100)
    f2 = Fraction(5432)
    solutions = solve(f1, f2, DEFAULT_LIMITS, Find.ALL)
    assert len(solutions) == 16
    first = solutions[0]
    assert first.fGPS == 1974896 and first.N31 == 1
    assert first.f3 == 1974896
    for sol in solutions:
        assert sol.f1 == f1 and sol.f2 == f2
        assert F3_LO <= sol.f3 <= F3_HI
        assert VCO_LO <= sol.fOSC <= VCO_HI
    # Best first.
    for a, b in zip(solutions, solutions[1:]):
        assert a.f3 >= b.f3

def test_output_lcm() -> None:
    assert output_lcm(Fraction(123431, 100), Fraction(5432)) == 2 * 95782456
    assert output_lcm(Fraction(10_000_000), Fraction(10_000_000)) \
        == 20_000_000
    # 12M / 4M = 3 is odd.
    assert output_lcm(Fraction(4_000_000), Fraction(12_000_000)) \
        == 24_000_000
    assert output_lcm(Fraction(2), Fraction(8)) == 16
    assert output_lcm(Fraction(4), Fraction(6)) == 24

def test_modes() -> None:
    f1 = 10 * 1000_000
    f2 = 120 * 1000_000
    everything = solve(f1, f2, DEFAULT_LIMITS, Find.ALL)
    assert len(everything) > 1
    expected = Solution(fGPS = 2_000_000, N31 = 1, N1_HS = 11, NC1_LS = 48,
                        NC2_LS = 4, N2_HS = 11, N2_LS = 240)
    previous = None
    for mode in Find.ANY, Find.GOOD, Find.BEST:
        result = solve(f1, f2, DEFAULT_LIMITS, mode)
        assert len(result) == 1
        sol, = result
        # The first candidate already reaches the maximum f3.
        assert sol == expected
        assert sol in everything
        sol.validate(Fraction(f1), Fraction(f2), DEFAULT_LIMITS)
        # Stricter modes search further, so never do worse.
        if previous is not None:
            assert sol.f3 >= previous.f3
        previous = sol
        assert everything[0].f3 >= sol.f3

def test_single_frequency() -> None:
    f = Fraction(1000)
    result = solve(f, f, DEFAULT_LIMITS, Find.GOOD)
    assert len(result) == 1
    sol, = result
    assert sol.NC1_LS == sol.NC2_LS
    assert sol.f1 == sol.f2 == f

def test_deterministic() -> None:
    f1 = Fraction(123431, 100)
    f2 = Fraction(5432)
    for mode in Find:
        assert solve(f1, f2, DEFAULT_LIMITS, mode) \
            == solve(f1, f2, DEFAULT_LIMITS, mode)

def test_order_independent() -> None:
    a = solve(Fraction(5432), Fraction(123431, 100), DEFAULT_LIMITS, Find.ALL)
    b = solve(Fraction(123431, 100), Fraction(5432), DEFAULT_LIMITS, Find.ALL)
    assert len(a) == len(b)
    assert [s.f3 for s in a] == [s.f3 for s in b]
    for sa, sb in zip(a, b):
        assert (sa.NC1_LS, sa.NC2_LS) == (sb.NC2_LS, sb.NC1_LS)

def test_no_solution() -> None:
    # Above the VCO range for every divider.
    f = Fraction(3_000_000_000)
    for mode in Find:
        assert solve(f, f, DEFAULT_LIMITS, mode) == []
    # An impossible phase detector range.
    limits = HardwareLimits(f3_lo = 3_000_000)
    assert solve(Fraction(10_000_000), Fraction(10_000_000), limits,
                 Find.ALL) == []

def test_gps_limit() -> None:
    # A low GPS ceiling forces factors of fGPS over to N2_LS.
    limits = HardwareLimits(gps_hi = 1_000_000)
    solutions = solve(Fraction(123431, 100), Fraction(5432), limits, Find.ALL)
    assert solutions
    for sol in solutions:
        assert sol.fGPS <= 1_000_000
        sol.validate(Fraction(123431, 100), Fraction(5432), limits)

def test_quality() -> None:
    sol = Solution(fGPS = 2_000_000, N31 = 1, N1_HS = 4, NC1_LS = 2,
                   NC2_LS = 2, N2_HS = 4, N2_LS = 2)
    assert sol.quality(DEFAULT_LIMITS) == Find.BEST
    sol = Solution(fGPS = 1_000_000, N31 = 1, N1_HS = 4, NC1_LS = 2,
                   NC2_LS = 2, N2_HS = 4, N2_LS = 2)
    assert sol.quality(DEFAULT_LIMITS) == Find.GOOD
    sol = Solution(fGPS = 999_999, N31 = 1, N1_HS = 4, NC1_LS = 2,
                   NC2_LS = 2, N2_HS = 4, N2_LS = 2)
    assert sol.quality(DEFAULT_LIMITS) == Find.ANY

def test_ranking() -> None:
    a = Solution(fGPS = 3, N31 = 2, N1_HS = 4, NC1_LS = 2,
                 NC2_LS = 2, N2_HS = 4, N2_LS = 2)
    b = Solution(fGPS = 4, N31 = 3, N1_HS = 4, NC1_LS = 2,
                 NC2_LS = 2, N2_HS = 4, N2_LS = 2)
    assert a < b
    assert not b < a
    assert a < None
    assert sorted([b, a]) == [a, b]

def test_overflow() -> None:
    try:
        Solution(fGPS = 1 << 32, N31 = 1, N1_HS = 4, NC1_LS = 2,
                 NC2_LS = 2, N2_HS = 4, N2_LS = 2)
    except OverflowError:
        pass
    else:
        assert False

def test_ncx_ls_range() -> None:
    assert not is_in_ncx_ls_range(1)
    assert is_in_ncx_ls_range(2)
    assert not is_in_ncx_ls_range(3)
    assert is_in_ncx_ls_range(NCN_LS_MAX)
    assert not is_in_ncx_ls_range(NCN_LS_MAX + 2)
