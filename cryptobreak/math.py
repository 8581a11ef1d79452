#!/usr/bin/env python
# encoding: utf-8

"""
Number theory for the public key primitives and their attacks.
Every big number goes through Python ints:
mod_pow is the single entry point for modular exponentiation.
"""

import functools
import itertools
import operator

import Crypto.Util.number


class InvalidKeyMaterialException(ValueError):
    """
    Thrown when asymmetric parameters are malformed or out of range:
    a zero modulus, a non-invertible value, a composite group order.
    """
    pass


def _check_modulus(modulus: int, lower: int=1):
    if modulus < lower:
        raise InvalidKeyMaterialException(
            "Modulus must be at least {}, got {}.".format(lower, modulus)
        )


def mod_pow(base: int, exponent: int, modulus: int) -> int:
    """
    Modular exponentiation.
    A negative exponent is served by the modular inverse of base.

    :param base: The base.
    :param exponent: The exponent.
    :param modulus: The modulus.
    :return: base ** exponent mod(modulus)
    :raise InvalidKeyMaterialException: On a non-positive modulus,
        or on a negative exponent of a non-invertible base.
    """
    _check_modulus(modulus)

    if exponent < 0:
        return pow(modinv(base, modulus), -exponent, modulus)
    return pow(base, exponent, modulus)


def extended_gcd(a: int, b: int) -> tuple:
    """
    Return g = GCD(a, b) and the Bezout coefficients x, y
    such that a * x + b * y = g.
    """
    old_r, r = abs(a), abs(b)
    old_x, x = 1, 0
    old_y, y = 0, 1

    while r:
        q = old_r // r
        old_r, r = r, old_r - q * r
        old_x, x = x, old_x - q * x
        old_y, y = y, old_y - q * y

    if a < 0:
        old_x = -old_x
    if b < 0:
        old_y = -old_y
    return old_r, old_x, old_y


def modinv(a: int, m: int) -> int:
    """
    Compute the inverse mod(m) of a.

    :param a: The integer whose inverse has to be found.
    :param m: The modulo, greater than 1.
    :return: The inverse of a mod(m).
    :raise InvalidKeyMaterialException: If an inverse doesn't exist.
    """
    _check_modulus(m, lower=2)

    g, x, _ = extended_gcd(a, m)
    if g != 1:
        raise InvalidKeyMaterialException(
            "{} is not invertible mod({}).".format(a, m)
        )
    return x % m


def crt(residues: list, moduli: list) -> tuple:
    """
    The Chinese Remainder Theorem.
    Find x such that x = residues[i] mod(moduli[i]) for each i.

    :param residues: The residues.
    :param moduli: The pairwise co-prime moduli.
    :return: x and the product of the moduli.
    :raise InvalidKeyMaterialException: If two moduli share a factor.
    """
    assert residues and len(residues) == len(moduli)

    product = functools.reduce(operator.mul, moduli)
    x = 0
    for r, m in zip(residues, moduli):
        partial = product // m
        x += r * partial * modinv(partial, m)
    return x % product, product


def integer_kth_root(n: int, k: int) -> int:
    """
    The greatest integer r such that r ** k <= n,
    by Newton's method on integers.
    """
    assert n >= 0 and k > 0
    if n < 2:
        return n

    guess = 1 << -(-n.bit_length() // k)
    while True:
        better = ((k - 1) * guess + n // guess ** (k - 1)) // k
        if better >= guess:
            return guess
        guess = better


def random_big_prime(N: int=1024, e: int=None) -> int:
    """
    Generate a random big prime of N bits.

    :param N: The number of bits of the prime.
    :param e: If given, the prime p will satisfy GCD(p - 1, e) = 1,
        so that e stays a valid RSA public exponent.
    :return: A new big random prime.
    """
    assert N >= 16

    while True:
        p = Crypto.Util.number.getPrime(N)
        if e is None or Crypto.Util.number.GCD(p - 1, e) == 1:
            return p


def is_prime(n: int) -> bool:
    """
    Probabilistic primality test.
    """
    return n > 1 and Crypto.Util.number.isPrime(n)


def small_factors(n: int, bound: int=2 ** 16) -> list:
    """
    Trial division: find the distinct prime factors of n below bound.

    :param n: The number to be factored.
    :param bound: The largest factor to be tried (excluded).
    :return: The sorted list of the distinct prime factors smaller than bound.
    """
    assert n > 0

    factors = []
    for f in itertools.chain((2, ), itertools.count(3, 2)):
        if f >= bound or f * f > n:
            break
        if n % f:
            continue
        factors.append(f)
        while n % f == 0:
            n //= f

    if 1 < n < bound:
        factors.append(n)
    return factors

