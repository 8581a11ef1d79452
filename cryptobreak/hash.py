#!/usr/bin/env python
# encoding: utf-8

"""
Pure Python SHA1, MD4 and SHA256.
All three are Merkle-Damgard constructions over 64 bytes blocks,
with an explicit state: hashing can resume from an observed digest
(see HashState and MerkleDamgardHash.resume).
"""

import collections

import cryptobreak.util

# Chaining registers, and how many bytes were compressed into them
HashState = collections.namedtuple("HashState", ["registers", "byte_count"])


def _md_pad_64(message: bytes, length_to_bytes, fake_byte_len: int=None) -> bytes:
    """
    Append 0x80, zeros up to 56 mod 64, then the 64 bits length.

    :param message: The bytes to be padded.
    :param length_to_bytes: Encodes [bit length] as 8 bytes, with the hash byte order.
    :param fake_byte_len: The length to encode, if not len(message).
    :return: The padded message.
    """
    byte_len = len(message) if fake_byte_len is None else fake_byte_len
    zeros = (55 - len(message)) % 64
    return message + b"\x80" + bytes(zeros) + bytes(length_to_bytes([byte_len * 8]))


class MerkleDamgardHash(object):
    """
    Apply the Merkle-Damgard transform to a compression function.

    :param name: The hash name.
    :param compress: The compression function (block, registers) -> registers.
    :param initial_registers: The initialization vector.
    :param registers_to_digest: Function that converts the registers to the digest.
    :param digest_to_registers: Function that converts the digest back to registers.
    :param length_to_bytes: Function that converts the bit length to bytes.
    """

    block_size = 64

    def __init__(
            self,
            name: str,
            compress,
            initial_registers: tuple,
            registers_to_digest,
            digest_to_registers,
            length_to_bytes,
    ):
        self.name = name
        self.compress = compress
        self.initial_registers = tuple(initial_registers)
        self.registers_to_digest = registers_to_digest
        self.digest_to_registers = digest_to_registers
        self.length_to_bytes = length_to_bytes
        self.digest_size = len(registers_to_digest(self.initial_registers))

    def __repr__(self):
        return "<{} hash>".format(self.name)

    def __call__(self, message: bytes) -> bytes:
        """
        Hash the message.

        :param message: The message to be hashed.
        :return: The message digest.
        """
        return self.resume(self.initial_state(), message)

    def initial_state(self) -> HashState:
        """
        :return: The state before any byte has been hashed.
        """
        return HashState(self.initial_registers, 0)

    def pad(self, message: bytes, fake_byte_len: int=None) -> bytes:
        """
        Pad the message as the hash function does before compressing it.

        :param message: The message to be padded.
        :param fake_byte_len: If not None, encode this length instead of the message one.
        :return: The padded message.
        """
        return _md_pad_64(message, self.length_to_bytes, fake_byte_len=fake_byte_len)

    def glue_padding(self, byte_len: int) -> bytes:
        """
        The padding that a message of byte_len bytes receives.

        :param byte_len: The length of the hashed message.
        :return: The padding bytes only.
        """
        return self.pad(bytes(byte_len))[byte_len:]

    def absorb(self, state: HashState, blocks: bytes) -> HashState:
        """
        Compress whole blocks into the state, without finalizing it.

        :param state: The current state.
        :param blocks: Some bytes, a multiple of the block size.
        :return: The new state.
        """
        assert len(blocks) % self.block_size == 0

        registers = state.registers
        for i in range(0, len(blocks), self.block_size):
            registers = self.compress(blocks[i:i + self.block_size], registers)
        return HashState(tuple(registers), state.byte_count + len(blocks))

    def resume(self, state: HashState, message: bytes) -> bytes:
        """
        Continue hashing from state, as if the bytes already compressed
        into it had been prepended to message.

        :param state: The state to be resumed.
        :param message: The remaining message.
        :return: The digest of the whole (virtual) message.
        """
        assert state.byte_count % self.block_size == 0, \
            "Can only resume from a block boundary."

        padded = self.pad(message, fake_byte_len=state.byte_count + len(message))
        return self.registers_to_digest(
            self.absorb(state, padded).registers
        )

    def state_from_digest(self, digest: bytes, byte_count: int) -> HashState:
        """
        Clone the state the hash had once it produced the digest.

        :param digest: An observed digest.
        :param byte_count: The length of the message padding included.
        :return: The cloned state.
        """
        assert len(digest) == self.digest_size
        return HashState(tuple(self.digest_to_registers(digest)), byte_count)


_sha1_k = (0x5a827999, 0x6ed9eba1, 0x8f1bbcdc, 0xca62c1d6)


def _sha1_compress(block: bytes, state: tuple) -> tuple:
    """
    SHA1 compression (FIPS 180-1): 80 rounds over the expanded block.

    :param block: 64 bytes.
    :param state: The five chaining registers.
    :return: The new registers.
    """
    rotl = cryptobreak.util.left_rotate

    w = list(cryptobreak.util.from_big_endian_unsigned_ints(block))
    for j in range(16, 80):
        w.append(rotl(w[j - 3] ^ w[j - 8] ^ w[j - 14] ^ w[j - 16], 1))

    a, b, c, d, e = state
    for i, word in enumerate(w):
        stage = i // 20
        if stage == 0:
            f = d ^ (b & (c ^ d))  # choose, written without ~
        elif stage == 2:
            f = (b & c) | (d & (b | c))  # majority
        else:
            f = b ^ c ^ d
        t = (rotl(a, 5) + f + e + _sha1_k[stage] + word) & 0xffffffff
        a, b, c, d, e = t, a, rotl(b, 30), c, d

    return tuple(
        (x + y) & 0xffffffff for x, y in zip(state, (a, b, c, d, e))
    )


SHA1 = MerkleDamgardHash(
    name="SHA1",
    compress=_sha1_compress,
    initial_registers=(0x67452301, 0xefcdab89, 0x98badcfe, 0x10325476, 0xc3d2e1f0),
    registers_to_digest=cryptobreak.util.to_big_endian_unsigned_ints,
    digest_to_registers=cryptobreak.util.from_big_endian_unsigned_ints,
    length_to_bytes=cryptobreak.util.to_big_endian_unsigned_longs
)


# MD4 (RFC 1320): per round, the boolean function, the additive constant,
# the order words are read in and the four rotation amounts.
_md4_rounds = (
    (
        lambda x, y, z: (x & y) | (~x & z),
        0,
        tuple(range(16)),
        (3, 7, 11, 19),
    ),
    (
        lambda x, y, z: (x & y) | (x & z) | (y & z),
        0x5a827999,
        tuple(i + j for i in range(4) for j in (0, 4, 8, 12)),
        (3, 5, 9, 13),
    ),
    (
        lambda x, y, z: x ^ y ^ z,
        0x6ed9eba1,
        tuple(i + j for i in (0, 2, 1, 3) for j in (0, 8, 4, 12)),
        (3, 9, 11, 15),
    ),
)


def _md4_compress(block: bytes, state: tuple) -> tuple:
    """
    MD4 compression: three rounds of 16 steps.

    :param block: 64 bytes.
    :param state: The four chaining registers.
    :return: The new registers.
    """
    x = cryptobreak.util.from_little_endian_unsigned_ints(block)
    r = list(state)

    for f, k, order, shifts in _md4_rounds:
        for step, i in enumerate(order):
            # Registers rotate a, d, c, b: step n updates r[-n % 4]
            t = -step % 4
            a, b, c, d = r[t], r[(t + 1) % 4], r[(t + 2) % 4], r[(t + 3) % 4]
            r[t] = cryptobreak.util.left_rotate(a + f(b, c, d) + x[i] + k, shifts[step % 4])

    return tuple(
        (h + v) & 0xffffffff for h, v in zip(state, r)
    )


MD4 = MerkleDamgardHash(
    name="MD4",
    compress=_md4_compress,
    initial_registers=(0x67452301, 0xefcdab89, 0x98badcfe, 0x10325476),
    registers_to_digest=cryptobreak.util.to_little_endian_unsigned_ints,
    digest_to_registers=cryptobreak.util.from_little_endian_unsigned_ints,
    length_to_bytes=cryptobreak.util.to_little_endian_unsigned_longs
)


_sha256_k = (
    0x428a2f98, 0x71374491, 0xb5c0fbcf, 0xe9b5dba5, 0x3956c25b, 0x59f111f1, 0x923f82a4, 0xab1c5ed5,
    0xd807aa98, 0x12835b01, 0x243185be, 0x550c7dc3, 0x72be5d74, 0x80deb1fe, 0x9bdc06a7, 0xc19bf174,
    0xe49b69c1, 0xefbe4786, 0x0fc19dc6, 0x240ca1cc, 0x2de92c6f, 0x4a7484aa, 0x5cb0a9dc, 0x76f988da,
    0x983e5152, 0xa831c66d, 0xb00327c8, 0xbf597fc7, 0xc6e00bf3, 0xd5a79147, 0x06ca6351, 0x14292967,
    0x27b70a85, 0x2e1b2138, 0x4d2c6dfc, 0x53380d13, 0x650a7354, 0x766a0abb, 0x81c2c92e, 0x92722c85,
    0xa2bfe8a1, 0xa81a664b, 0xc24b8b70, 0xc76c51a3, 0xd192e819, 0xd6990624, 0xf40e3585, 0x106aa070,
    0x19a4c116, 0x1e376c08, 0x2748774c, 0x34b0bcb5, 0x391c0cb3, 0x4ed8aa4a, 0x5b9cca4f, 0x682e6ff3,
    0x748f82ee, 0x78a5636f, 0x84c87814, 0x8cc70208, 0x90befffa, 0xa4506ceb, 0xbef9a3f7, 0xc67178f2,
)


def _sha256_compress(block: bytes, state: tuple) -> tuple:
    """
    The SHA256 compression function (FIPS 180-4).

    :param block: The block to be compressed.
    :param state: The current SHA256 state.
    :return: The compressed block.
    """
    rr = cryptobreak.util.right_rotate

    w = list(cryptobreak.util.from_big_endian_unsigned_ints(block)) + [0] * 48
    for j in range(16, 64):
        s0 = rr(w[j - 15], 7) ^ rr(w[j - 15], 18) ^ (w[j - 15] >> 3)
        s1 = rr(w[j - 2], 17) ^ rr(w[j - 2], 19) ^ (w[j - 2] >> 10)
        w[j] = (w[j - 16] + s0 + w[j - 7] + s1) & 0xffffffff

    a, b, c, d, e, f, g, h = state

    for i in range(64):
        big_s1 = rr(e, 6) ^ rr(e, 11) ^ rr(e, 25)
        ch = g ^ (e & (f ^ g))
        t1 = h + big_s1 + ch + _sha256_k[i] + w[i]
        big_s0 = rr(a, 2) ^ rr(a, 13) ^ rr(a, 22)
        maj = (a & b) ^ (a & c) ^ (b & c)
        t2 = big_s0 + maj

        a, b, c, d, e, f, g, h = (
            (t1 + t2) & 0xffffffff,
            a,
            b,
            c,
            (d + t1) & 0xffffffff,
            e,
            f,
            g
        )

    return tuple(
        (x + y) & 0xffffffff for x, y in zip(state, (a, b, c, d, e, f, g, h))
    )


SHA256 = MerkleDamgardHash(
    name="SHA256",
    compress=_sha256_compress,
    initial_registers=(
        0x6a09e667, 0xbb67ae85, 0x3c6ef372, 0xa54ff53a,
        0x510e527f, 0x9b05688c, 0x1f83d9ab, 0x5be0cd19
    ),
    registers_to_digest=cryptobreak.util.to_big_endian_unsigned_ints,
    digest_to_registers=cryptobreak.util.from_big_endian_unsigned_ints,
    length_to_bytes=cryptobreak.util.to_big_endian_unsigned_longs
)
