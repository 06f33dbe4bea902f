'''Integer factorisation, and the search for the largest divisor of a number
that fits under a limit.'''

from math import gcd

__all__ = 'factorize', 'largest_factor'

SMALL_PRIMES = [
    2, 3, 5, 7, 11, 13, 17, 19, 23, 29, 31, 37, 41, 43, 47, 53, 59, 61, 67, 71,
    73, 79, 83, 89, 97, 101, 103, 107, 109, 113, 127, 131, 137, 139, 149, 151,
    157, 163, 167, 173, 179, 181, 191, 193, 197, 199, 211, 223, 227, 229, 233,
    239, 241, 251, 257, 263, 269, 271, 277, 281, 283, 293, 307, 311, 313, 317,
    331, 337, 347, 349, 353, 359, 367, 373, 379, 383, 389, 397, 401, 409, 419,
    421, 431, 433, 439, 443, 449, 457, 461, 463, 467, 479, 487, 491, 499, 503,
    509, 521, 523, 541, 547, 557, 563, 569, 571, 577, 587, 593, 599, 601, 607,
    613, 617, 619, 631, 641, 643, 647, 653, 659, 661, 673, 677, 683, 691, 701,
    709, 719, 727, 733, 739, 743, 751, 757, 761, 769, 773, 787, 797, 809, 811,
    821, 823, 827, 829, 839, 853, 857, 859, 863, 877, 881, 883, 887, 907, 911,
    919, 929, 937, 941, 947, 953, 967, 971, 977, 983, 991, 997]

# Anything below this with no factor in SMALL_PRIMES is prime.
SMALL_FACTOR_LIMIT = 1009 * 1009

def factorize(n: int) -> list[int]:
    '''Prime factors of n, in non-decreasing order, repeated according to
    their multiplicity.  factorize(1) is empty.'''
    assert n > 0
    factors: list[int] = []
    for p in SMALL_PRIMES:
        while n % p == 0:
            factors.append(p)
            n //= p
        if n < p * p:
            break
    if n >= SMALL_FACTOR_LIMIT:
        large_factors(factors, n)
        factors.sort()
    elif n > 1:
        factors.append(n)
    return factors

def large_factors(factors: list[int], n: int) -> None:
    '''Append the prime factors of n, which has no small prime factors.'''
    if n == 1:
        return
    if miller_rabin_pseudo_prime(n):
        factors.append(n)
        return
    factor = pollard_ρ(n)
    large_factors(factors, factor)
    large_factors(factors, n // factor)

def pollard_ρ(n: int) -> int:
    '''Pollard rho, returning a non-trivial factor of the composite n.'''
    # The choice of constants is arbitrary, the primes are just handy.
    for a in reversed(SMALL_PRIMES):
        slow = a
        fast = (slow * slow + a) % n
        count = 2
        while True:
            g = gcd(n, slow - fast)
            if g != 1:
                if g < n:
                    return g
                break
            if count & (count - 1) == 0:
                slow = fast
            fast = (fast * fast + a) % n
            count += 1
    raise ArithmeticError(f'Pollard rho failed to split {n}')

def miller_rabin_pseudo_prime(n: int) -> bool:
    n = abs(n)
    if n < 3:
        return n == 2
    if n % 2 == 0:
        return False
    num_twos = ((n - 1) & (1 - n)).bit_length() - 1
    odd = (n - 1) >> num_twos
    assert odd & 1 != 0
    for p in SMALL_PRIMES[-6:]:
        if n % p == 0:
            return n == p
        x = pow(p, odd, n)
        if x == 1 or x == n - 1:
            continue
        for _ in range(1, num_twos):
            x = x * x % n
            if x == n - 1:
                break
        else:
            return False
    return True

def do_largest_factor(seen: set[int], product: int, limit: int,
                      factors: list[int], index: int) -> int:
    '''Worker function for largest_factor below.

    At each index, either cut the current prime out of product, or skip past
    all copies of it.  The primes are non-decreasing, so the first cut that
    lands under the limit is the best one at this level.'''
    best = 1
    if product in seen:
        return best
    seen.add(product)
    while index < len(factors):
        current = factors[index]
        result = product // current
        if best < result <= limit:
            best = result
            break
        if index + 1 < len(factors):
            best = max(best, do_largest_factor(
                seen, result, limit, factors, index + 1))
        index += 1
        while index < len(factors) and factors[index] == current:
            index += 1
    return best

def largest_factor(product: int, limit: int) -> int:
    '''Return the largest divisor of product that is no more than limit.'''
    assert product > 0 and limit > 0
    if product <= limit:
        return product
    seen: set[int] = set()
    return do_largest_factor(seen, product, limit, factorize(product), 0)

def brute_largest_factor(product: int, limit: int) -> int:
    return max(d for d in range(1, min(product, limit) + 1) if product % d == 0)

def test_small_primes() -> None:
    assert len(SMALL_PRIMES) == 168
    sieve = bytearray(1000)
    sieve[0] = sieve[1] = 1
    for i in range(2, 32):
        if sieve[i] == 0:
            for j in range(i * i, len(sieve), i):
                sieve[j] = 1
    assert SMALL_PRIMES == [i for i, f in enumerate(sieve) if f == 0]

def test_miller_rabin() -> None:
    assert miller_rabin_pseudo_prime(2)
    assert not miller_rabin_pseudo_prime(1)
    assert not miller_rabin_pseudo_prime(SMALL_FACTOR_LIMIT)
    assert miller_rabin_pseudo_prime(65537)
    assert not miller_rabin_pseudo_prime((1 << 32) - 1)
    assert not miller_rabin_pseudo_prime(1301119843216015234441)

def test_pollard_ρ() -> None:
    for n in (1 << 32) + 1, 1301119843216015234441:
        f = pollard_ρ(n)
        assert 1 < f < n
        assert n % f == 0

def test_factorize() -> None:
    assert factorize(1) == []
    assert factorize(2) == [2]
    assert factorize(360) == [2, 2, 2, 3, 3, 5]
    assert factorize(1009 * 1009) == [1009, 1009]
    assert factorize(1974896) == [2, 2, 2, 2, 7, 7, 11, 229]
    for n in 65537, (1 << 32) - 1, 1301119843216015234441, \
            2148696083 * 18446744556051857693, 2 ** 5 * 1013 ** 3:
        factors = factorize(n)
        assert factors == sorted(factors)
        product = 1
        for f in factors:
            assert miller_rabin_pseudo_prime(f)
            product *= f
        assert product == n

def test_largest_factor_fits() -> None:
    assert largest_factor(1000, 1000) == 1000
    assert largest_factor(17, 100) == 17
    # A prime above the limit has nothing useful to offer.
    assert largest_factor(1009, 1000) == 1
    assert largest_factor(2 * 3 * 5 * 7, 100) == 70
    assert largest_factor(2 ** 10, 1000) == 512

def test_largest_factor_brute() -> None:
    for product in 720, 1024, 9699690, 123431 * 16, 3 ** 7 * 5 ** 3, 99991:
        for limit in 1, 2, 7, 50, 99, 1000, 12345:
            got = largest_factor(product, limit)
            assert got == brute_largest_factor(product, limit), \
                f'{product} {limit} {got}'
            assert product % got == 0
            assert got <= max(limit, 1)
