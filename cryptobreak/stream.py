#!/usr/bin/env python
# encoding: utf-8

"""Handle stream operations here."""

import cryptobreak.prng
import cryptobreak.util


def mt19937_keystream(key: int, length: int) -> bytes:
    """
    Generate length bytes of keystream from a MT19937 seeded with key.
    Each 32 bits output gives 4 bytes, most significant first.

    :param key: The MT seed.
    :param length: The keystream length.
    :return: The keystream.
    """
    assert 0 <= key <= 2 ** 32 - 1
    assert length >= 0

    mt_prng = cryptobreak.prng.MT19937(key)
    keystream = bytearray()

    while len(keystream) < length:
        keystream += mt_prng.extract_number().to_bytes(4, 'big')

    return bytes(keystream[:length])


def mt19937_stream(key: int, b: bytes) -> bytes:
    """Encrypt/decrypt by using MT19937 generated numbers as key stream.

    :param key: The MT seed.
    :param b: The buffer to be encrypted/decrypted.
    :returns: The encrypted/decrypted buffer.
    """
    return cryptobreak.util.xor(
        b, mt19937_keystream(key, len(b))
    )
