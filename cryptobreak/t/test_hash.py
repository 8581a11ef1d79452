#!/usr/bin/env python
# encoding: utf-8

"""
Test the hash functions.
"""

import unittest
import binascii
import hashlib

import cryptobreak.hash


class HashTestCase(unittest.TestCase):
    def test_sha1(self):
        b = b"YELLOW_SUBMARINE!" * 30

        f = cryptobreak.hash.SHA1
        h = f(b)

        truth = hashlib.sha1()
        truth.update(b)

        self.assertEqual(truth.digest(), h)

    def test_sha1_lengths(self):
        f = cryptobreak.hash.SHA1

        # Around the padding boundaries
        for length in (0, 1, 55, 56, 63, 64, 65, 119, 120, 128):
            b = b"a" * length
            self.assertEqual(f(b), hashlib.sha1(b).digest())

    def test_md4(self):
        f = cryptobreak.hash.MD4

        for message, truth in {
            b"": b"31d6cfe0d16ae931b73c59d7e0c089c0",
            b"a": b"bde52cb31de33e46245e05fbdbd6fb24",
            b"abc": b"a448017aaf21d8525fc10ae87aa6729d",
            b"message digest": b"d9130a8164549fe818874806e1c7014b",
            b"abcdefghijklmnopqrstuvwxyz": b"d79e1c308aa5bbcdeea8ed63df412da9",
            b"ABCDEFGHIJKLMNOPQRSTUVWXYZ"
            b"abcdefghijklmnopqrstuvwxyz0123456789":
                b"043f8582f241db351ce627e153e7f0e4",
            b"123456789012345678901234567890123456789"
            b"01234567890123456789012345678901234567890":
                b"e33b4ddc9c38f2199c3e7b164fcc0536",
        }.items():
            self.assertEqual(
                binascii.hexlify(
                    f(message)
                ),
                truth
            )

    def test_sha256(self):
        f = cryptobreak.hash.SHA256

        for b in (b"", b"abc", b"YELLOW_SUBMARINE!" * 30):
            self.assertEqual(f(b), hashlib.sha256(b).digest())

    def test_single_bit_change(self):
        message = bytearray(b"The quick brown fox jumps over the lazy dog")
        for h in (cryptobreak.hash.SHA1, cryptobreak.hash.MD4, cryptobreak.hash.SHA256):
            digest = h(bytes(message))
            self.assertEqual(digest, h(bytes(message)))

            for i in (0, 7, len(message) * 8 - 1):
                flipped = bytearray(message)
                flipped[i // 8] ^= 1 << (i % 8)
                self.assertNotEqual(h(bytes(flipped)), digest)

    def test_digest_size(self):
        self.assertEqual(cryptobreak.hash.SHA1.digest_size, 20)
        self.assertEqual(cryptobreak.hash.MD4.digest_size, 16)
        self.assertEqual(cryptobreak.hash.SHA256.digest_size, 32)

    def test_pad(self):
        for h in (cryptobreak.hash.SHA1, cryptobreak.hash.MD4, cryptobreak.hash.SHA256):
            for length in (0, 10, 55, 56, 64):
                padded = h.pad(b"a" * length)
                self.assertEqual(len(padded) % h.block_size, 0)
                self.assertEqual(padded[:length], b"a" * length)
                self.assertEqual(padded[length], 0x80)
                self.assertEqual(h.glue_padding(length), padded[length:])

    def test_length_extension(self):
        secret_and_message = b"SECRET" + b"comment1=cooking%20MCs"
        extension = b";admin=true"

        for h in (cryptobreak.hash.SHA1, cryptobreak.hash.MD4, cryptobreak.hash.SHA256):
            digest = h(secret_and_message)
            glue = h.glue_padding(len(secret_and_message))

            state = h.state_from_digest(digest, len(secret_and_message) + len(glue))
            self.assertEqual(
                h.resume(state, extension),
                h(secret_and_message + glue + extension)
            )

    def test_absorb(self):
        h = cryptobreak.hash.SHA1
        b = b"A" * 64 + b"B" * 10

        state = h.absorb(h.initial_state(), b[:64])
        self.assertEqual(state.byte_count, 64)
        self.assertEqual(h.resume(state, b[64:]), h(b))


if __name__ == '__main__':
    unittest.main()
