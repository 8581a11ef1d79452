#!/usr/bin/env python
# encoding: utf-8

"""
Statistics over buffers: scoring English text,
breaking single-byte and repeating-key XOR.
"""

import collections
import heapq
import itertools
import string

import cryptobreak.util
import cryptobreak.blocks

"""
Relative frequency of each letter in English text.
"""
english_frequencies = dict(zip(
    string.ascii_lowercase,
    (
        0.08167, 0.01492, 0.02782, 0.04253, 0.12702, 0.02228, 0.02015,
        0.06094, 0.06966, 0.00153, 0.00772, 0.04025, 0.02406, 0.06749,
        0.07507, 0.01929, 0.00095, 0.05987, 0.06327, 0.09056, 0.02758,
        0.00978, 0.02360, 0.00150, 0.01974, 0.00074,
    )
))

"""
Non-letters that are common in English text, hence not penalized.
"""
_neutral_chars = frozenset(" '\",.!?;:-\n")

_printable = frozenset(string.printable.encode("ascii"))

_worst_score = float("inf")


def chi_squared(s: str) -> float:
    """
    The Chi-Squared statistic of the letters of s
    against the English letter frequencies.
    Any other character, unless neutral, adds its count to the fourth power.

    :param s: A non empty string.
    :return: The statistic, lower means more English.
    """
    assert s

    counts = collections.Counter(s.lower())
    score = 0.0
    for letter, frequency in english_frequencies.items():
        expected = frequency * len(s)
        score += (counts[letter] - expected) ** 2 / expected

    for c, n in counts.items():
        if c not in english_frequencies and c not in _neutral_chars:
            score += n ** 4
    return score


def english_score(b: bytes) -> float:
    """
    :return: The chi_squared of b decoded as ASCII, infinite if it doesn't decode.
    """
    try:
        return chi_squared(b.decode("ascii"))
    except UnicodeDecodeError:
        return _worst_score


def most_likely_xor_chars(b: bytes, count: int=1) -> tuple:
    """
    Rank the 256 single-byte keys by how English b looks once XORed with them.

    :param b: A buffer, XORed against a single unknown byte.
    :param count: The number of chars to be returned.
    :return: The count most likely keys (as chars), best first.
    """
    assert b

    best = heapq.nsmallest(
        count,
        range(256),
        key=lambda k: english_score(cryptobreak.util.xor_char(b, k))
    )
    return tuple(chr(k) for k in best)


def most_likely_key_length(b: bytes, max_length: int=40) -> int:
    """
    Guess the key length of a repeating-key XOR.
    For each candidate length, cut the first four key-sized slices
    and average their pairwise Hamming distances, normalized by the length:
    the right length gives the smallest one.

    :param b: The encrypted buffer, at least 8 bytes long.
    :param max_length: The largest key length to be tried.
    :return: The most likely key length.
    """
    candidates = range(2, min(max_length, len(b) // 4) + 1)
    assert candidates, "Buffer is too short to guess the key length."

    def normalized_distance(length: int) -> float:
        slices = [b[i * length:(i + 1) * length] for i in range(4)]
        distances = [
            hamming_d(x, y) / length
            for x, y in itertools.combinations(slices, 2)
        ]
        return sum(distances) / len(distances)

    return min(candidates, key=normalized_distance)


def break_repeating_xor(b: bytes, key_length: int=None) -> bytes:
    """
    Recover the key of a repeating-key XOR encryption.
    Guess the key length (unless given), transpose the buffer
    in key_length columns and break each one as a single-char XOR.

    :param b: The encrypted buffer.
    :param key_length: The key length, if known.
    :return: The most likely key.
    """
    if key_length is None:
        key_length = most_likely_key_length(b)

    columns = cryptobreak.blocks.split_blocks(b, key_length)
    return "".join(most_likely_xor_chars(c)[0] for c in columns).encode("latin-1")


def is_printable(b: bytes) -> bool:
    return all(c in _printable for c in b)


def count_set_bits(n: int) -> int:
    """
    :param n: A byte value.
    :return: How many of its bits are 1.
    """
    assert 0 <= n <= 0xff
    return bin(n).count("1")


def hamming_d(a: bytes, b: bytes) -> int:
    """
    The number of bits a and b differ for.

    :raise LengthMismatchException: If a and b differ in length.
    """
    return sum(count_set_bits(x) for x in cryptobreak.util.xor(a, b))
