#!/usr/bin/env python
# encoding: utf-8

"""
Block level tools: slicing, padding and the AES modes of operation.
Only the raw AES block transform comes from pycryptodome,
the modes are chained by hand.
"""

import math

import cryptobreak.util

from Crypto.Cipher import AES

# Re-exported, callers of the block modes shouldn't need util.
from cryptobreak.util import LengthMismatchException

BLOCK_SIZE = 16  # AES, in bytes


class InvalidPaddingException(Exception):
    """
    A buffer doesn't end with a well formed padding.
    """
    pass


def bytes_in_block(block_size: int, i: int) -> slice:
    """
    :param block_size: The block size.
    :param i: The block index.
    :return: The slice selecting block i of a buffer.
    """
    start = block_size * i
    return slice(start, start + block_size)


def chunks(b: bytes, block_size: int=BLOCK_SIZE) -> list:
    """
    Split the buffer into consecutive blocks.
    The last one may be shorter.

    :param b: The buffer.
    :param block_size: The block size.
    :return: A list of blocks.
    """
    assert block_size > 0
    return [b[i:i + block_size] for i in range(0, len(b), block_size)]


def split_blocks(b: bytes, k_len: int) -> tuple:
    """
    Transpose b into k_len columns,
    column i holding the bytes whose index is i modulo k_len.

    :param b: The input buffer.
    :param k_len: The number of columns (a repeating key length).
    :return: A tuple of k_len buffers.
    """
    assert len(b) >= k_len
    return tuple(bytes(b[i::k_len]) for i in range(k_len))


def pkcs_7(b: bytes, size: int=BLOCK_SIZE) -> bytes:
    r"""
    PKCS#7: append n bytes of value n, 1 <= n <= size,
    up to the next multiple of size.
    A block aligned buffer gets a whole block of padding:
        pkcs_7(b"YELLOW SUBMARINE") == b"YELLOW SUBMARINE" + b"\x10" * 16

    :param b: A buffer of bytes.
    :param size: The block size.
    :return: The padded buffer.
    """
    assert 0 < size <= 0xff

    n = size - len(b) % size
    return bytes(b) + bytes((n,)) * n


def un_pkcs_7(b: bytes, size: int=BLOCK_SIZE) -> bytes:
    """
    Strip and check PKCS#7 padding.

    :param b: A padded buffer of bytes.
    :param size: The block size.
    :return: The buffer without padding.
    :raises InvalidPaddingException: On a structurally wrong padding.
    """
    if not b or len(b) % size:
        raise InvalidPaddingException(
            "Padded buffer length {} is not a positive multiple of {}.".format(len(b), size)
        )

    n = b[-1]
    if not 0 < n <= size:
        raise InvalidPaddingException("Bad padding value {}.".format(n))

    if b[-n:] != bytes((n,)) * n:
        raise InvalidPaddingException("Padding bytes do not match.")

    return bytes(b[:-n])


def pkcs_1_5(b: bytes, size: int, block_type: int=0x01) -> int:
    """
    PKCS#1 v1.5 block, as an integer:
        00 || BT || PS || 00 || b
    PS fills the block, with 0xff bytes for block type 0x01 (signatures)
    and with random non-zero bytes for block type 0x02 (encryption).

    :param b: A buffer of bytes, at most size - 11 long.
    :param size: The block size.
    :param block_type: 0x01 or 0x02.
    :return: The padded block, big endian.
    :raises LengthMismatchException: If b doesn't fit.
    """
    assert block_type in (0x01, 0x02)
    if len(b) > size - 11:
        raise LengthMismatchException(
            "Message of {} bytes doesn't fit a {} bytes block.".format(len(b), size)
        )

    ps_len = size - 3 - len(b)
    if block_type == 0x01:
        ps = b"\xff" * ps_len
    else:
        ps = bytes(
            (c % 255) + 1 for c in cryptobreak.util.random_bytes_range(ps_len)
        )

    return int.from_bytes(bytes((0, block_type)) + ps + b"\x00" + b, byteorder="big")


def any_equal_block(b: bytes, block_size: int=BLOCK_SIZE) -> bool:
    """
    :param b: A bytes buffer.
    :param block_size: The block size.
    :return: True if some block shows up twice, the ECB fingerprint.
    """
    b = chunks(b, block_size)
    return len(set(b)) != len(b)


def _check_key(key: bytes):
    if len(key) not in (16, 24, 32):
        raise LengthMismatchException(
            "Got wrong key size {}.".format(len(key))
        )


def _check_aligned(b: bytes):
    if len(b) % BLOCK_SIZE:
        raise LengthMismatchException(
            "Buffer length {} is not a multiple of {}.".format(len(b), BLOCK_SIZE)
        )


def aes_ecb(key: bytes, b: bytes, decrypt: bool=False) -> bytes:
    """
    The raw AES block transform, applied to each block of b
    independently. No padding is applied or removed.

    :param key: A 16, 24 or 32 bytes key.
    :param b: A block aligned buffer.
    :param decrypt: Run the inverse transform.
    :return: The transformed buffer.
    :raises LengthMismatchException: On a bad key or an unaligned buffer.
    """
    _check_key(key)
    _check_aligned(b)

    cipher = AES.new(key, AES.MODE_ECB)
    return cipher.decrypt(b) if decrypt else cipher.encrypt(b)


def aes_ecb_encrypt(key: bytes, plaintext: bytes) -> bytes:
    """
    PKCS#7 pad the plaintext and encrypt it with AES ECB.
    """
    return aes_ecb(key, pkcs_7(plaintext))


def aes_ecb_decrypt(key: bytes, ciphertext: bytes) -> bytes:
    """
    Decrypt with AES ECB and remove the PKCS#7 padding.

    :raises InvalidPaddingException: If the padding is wrong.
    """
    return un_pkcs_7(aes_ecb(key, ciphertext, decrypt=True))


def aes_cbc(
        key: bytes, b: bytes,
        decrypt: bool=False,
        iv: bytes=None,
        random_iv: bool=False
) -> tuple:
    """
    AES CBC, chained one block at a time over aes_ecb.
    No padding is applied or removed.

        C_i = E(P_i ^ C_i-1)    P_i = D(C_i) ^ C_i-1    C_-1 = IV

    :param key: A 16, 24 or 32 bytes key.
    :param b: A block aligned buffer.
    :param decrypt: Decrypt instead of encrypting.
    :param iv: The IV, when None a zero (or random, see random_iv) one is used.
    :param random_iv: Draw a random IV if iv is None.
    :return: The transformed buffer and the IV.
    """
    _check_key(key)
    _check_aligned(b)

    if iv is None:
        iv = cryptobreak.util.random_bytes_range(BLOCK_SIZE) if random_iv \
            else bytes(BLOCK_SIZE)
    if len(iv) != BLOCK_SIZE:
        raise LengthMismatchException("Got wrong IV size {}.".format(len(iv)))

    out = []
    chain = iv
    for block in chunks(b):
        if decrypt:
            out.append(cryptobreak.util.xor(aes_ecb(key, block, True), chain))
            chain = block
        else:
            chain = aes_ecb(key, cryptobreak.util.xor(block, chain))
            out.append(chain)

    return b"".join(out), iv


def aes_cbc_encrypt(key: bytes, iv: bytes, plaintext: bytes) -> bytes:
    """
    PKCS#7 pad the plaintext and encrypt it with AES CBC.

    :return: The ciphertext, IV excluded.
    """
    return aes_cbc(key, pkcs_7(plaintext), iv=iv)[0]


def aes_cbc_decrypt(key: bytes, iv: bytes, ciphertext: bytes) -> bytes:
    """
    Decrypt with AES CBC and remove the PKCS#7 padding.

    :raises InvalidPaddingException: If the padding is wrong.
    """
    return un_pkcs_7(aes_cbc(key, ciphertext, decrypt=True, iv=iv)[0])


def aes_ctr_keystream(key: bytes, length: int, nonce: int=0) -> bytes:
    """
    The AES CTR keystream, block i being
        AES(key, nonce || i)
    with nonce and i 64 bits little endian.

    :param key: The cipher key.
    :param length: How many keystream bytes.
    :param nonce: The nonce.
    :return: length bytes of keystream.
    """
    _check_key(key)

    prefix = nonce.to_bytes(8, "little", signed=False)
    counters = b"".join(
        prefix + i.to_bytes(8, "little", signed=False)
        for i in range(math.ceil(length / BLOCK_SIZE))
    )
    return aes_ecb(key, counters)[:length]


def aes_ctr(
        key: bytes,
        b: bytes,
        nonce: int=0,
        decrypt: bool=False,
) -> bytes:
    """
    AES CTR, b XOR the keystream: encryption and decryption coincide.

    :param key: The cipher key.
    :param b: The buffer, of any length.
    :param nonce: The nonce.
    :param decrypt: Unused, keeps the signature of the other modes.
    :return: The transformed buffer.
    """
    if not b:
        return b""

    return cryptobreak.util.xor(b, aes_ctr_keystream(key, len(b), nonce))


aes_ctr_encrypt = aes_ctr_decrypt = aes_ctr
