#!/usr/bin/env python
# encoding: utf-8

"""
Byte level helpers shared by every primitive:
XOR, word packing, key=value encoding and randomness.
"""

import base64
import itertools
import random
import re
import struct

import Crypto.Random

"""
Default key size for the AES keys generated by the oracles.
"""
AES_KEY_SIZE = 16


class LengthMismatchException(ValueError):
    """
    Thrown when two operands (or an operand and a block size)
    do not have compatible lengths.
    """
    pass


def bytes_to_b64(b: bytes) -> bytes:
    """
    :param b: Some raw bytes.
    :return: Their base64 encoding.
    """
    return base64.b64encode(b)


def xor(a: bytes, b: bytes) -> bytes:
    """Return a xor b.

    :param a: Some bytes.
    :param b: Some bytes.
    :returns: a xor b
    :raises LengthMismatchException: If a and b differ in length.
    """
    if len(a) != len(b):
        raise LengthMismatchException(
            "Arguments must have same length, got {} and {}.".format(len(a), len(b))
        )

    return bytes(x ^ y for x, y in zip(a, b))


def xor_char(b: bytes, c) -> bytes:
    """
    XOR each byte of b against the single character (or byte value) c.
    """
    if isinstance(c, str):
        c = ord(c)
    if not 0 <= c <= 0xff:
        raise LengthMismatchException("{} doesn't fit a single byte.".format(c))

    return bytes(x ^ c for x in b)


def repeating_xor(b: bytes, key: bytes) -> bytes:
    """
    Cycle the key over the whole buffer and XOR them.
    A key at least as long as b acts as a keystream.

    :raises LengthMismatchException: On an empty key.
    """
    if not key:
        raise LengthMismatchException("Can't XOR against an empty key.")

    return bytes(x ^ k for x, k in zip(b, itertools.cycle(key)))


def escape_metas(s: str, meta: str, escape: str="\\") -> str:
    """
    Prefix every occurrence of the meta-characters with escape.

    :param s: The string to be escaped.
    :param meta: The characters to be escaped.
    :param escape: The escape character.
    :return: The escaped string.
    """
    assert meta
    return re.sub(
        "[{}]".format(re.escape(meta)),
        lambda m: escape + m.group(0),
        s
    )


def key_value_parsing(s: str, separator: str="&") -> dict:
    """
    Parse k_1=v_1&k_2=v_2 to a dictionary.
    Pairs without an "=" are skipped, a repeated key keeps its last value.
    """
    assert s

    d = {}
    for pair in s.split(separator):
        k, sign, v = pair.partition("=")
        if sign:
            d[k] = v
    return d


def dictionary_to_kv(d: dict, separator: str="&") -> str:
    """
    Encode a dictionary as k_1=v_1&k_2=v_2, in insertion order.
    """
    assert d
    return separator.join("{}={}".format(k, v) for k, v in d.items())


def int_32_lsb(x: int) -> int:
    """
    :return: The 32 least significant bits of x.
    """
    return x & 0xffffffff


def _words(byteorder: str, word: str, pack: bool):
    """
    Build a converter between a sequence of unsigned words and bytes.

    :param byteorder: ">" for big endian, "<" for little endian.
    :param word: The struct code of a single word ("I" or "Q").
    :param pack: Convert words to bytes if True, bytes to words otherwise.
    """
    size = struct.calcsize(word)

    def to_bytes(words) -> bytes:
        words = tuple(words)
        return struct.pack("{}{}{}".format(byteorder, len(words), word), *words)

    def from_bytes(b: bytes) -> tuple:
        if len(b) % size:
            raise LengthMismatchException(
                "Buffer length {} is not a multiple of {}.".format(len(b), size)
            )
        return struct.unpack("{}{}{}".format(byteorder, len(b) // size, word), b)

    return to_bytes if pack else from_bytes


to_big_endian_unsigned_ints = _words(">", "I", pack=True)
to_big_endian_unsigned_longs = _words(">", "Q", pack=True)
to_little_endian_unsigned_ints = _words("<", "I", pack=True)
to_little_endian_unsigned_longs = _words("<", "Q", pack=True)
from_big_endian_unsigned_ints = _words(">", "I", pack=False)
from_little_endian_unsigned_ints = _words("<", "I", pack=False)


def left_rotate(n: int, b: int) -> int:
    """
    Rotate the 32-bit word n left by b bits.
    """
    n &= 0xffffffff
    return ((n << b) | (n >> (32 - b))) & 0xffffffff


def right_rotate(n: int, b: int) -> int:
    """
    Rotate the 32-bit word n right by b bits.
    """
    return left_rotate(n, (32 - b) % 32)


def bytes_for_int(n: int, length: int=None, byteorder: str="little") -> bytes:
    """
    Represent a non-negative int in bytes.

    :param n: The int to be represented in bytes.
    :param length: The number of bytes (defaults to the minimum needed).
    :param byteorder: Either 'little' or 'big'.
    :return: A byte representation of the int.
    """
    assert n >= 0

    if length is None:
        length = max(1, -(-n.bit_length() // 8))
    return n.to_bytes(length, byteorder)


def random_aes_key(size: int=AES_KEY_SIZE) -> bytes:
    """
    :param size: The key size in bytes (16, 24 or 32).
    :return: A random AES key.
    """
    if size not in (16, 24, 32):
        raise LengthMismatchException("Bad AES key size {}.".format(size))
    return Crypto.Random.get_random_bytes(size)


def random_bytes_range(length: int) -> bytes:
    """
    :return: Exactly length random bytes.
    """
    assert length >= 0
    return Crypto.Random.get_random_bytes(length) if length else b""


def random_bytes_random_range(low: int, high: int) -> bytes:
    """
    Between low and high (included) random bytes.
    """
    assert 0 <= low <= high
    return random_bytes_range(random.randint(low, high))
