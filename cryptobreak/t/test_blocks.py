#!/usr/bin/env python
# encoding: utf-8

import base64
import unittest

import cryptobreak.blocks
import cryptobreak.util

from Crypto.Cipher import AES
from Crypto.Util import Counter


class BlocksTestCase(unittest.TestCase):
    def test_split_blocks(self):
        f = cryptobreak.blocks.split_blocks
        b = "this is a test".encode("ascii")
        k_len = 3

        blocks = f(b, k_len)
        self.assertEqual(
            len(blocks),
            k_len
        )
        self.assertEqual(
            sum(len(i) for i in blocks),
            len(b)
        )

        l = list()
        for i in range(len(blocks[0])):
            for j in range(len(blocks)):
                try:
                    l.append(blocks[j][i])
                except IndexError:
                    pass
        l = bytes(l)

        self.assertEqual(
            b, l
        )

    def test_chunks(self):
        f = cryptobreak.blocks.chunks
        self.assertEqual(f(b"a" * 16 + b"b" * 16), [b"a" * 16, b"b" * 16])
        self.assertEqual(f(b"abcde", 2), [b"ab", b"cd", b"e"])
        self.assertEqual(f(b""), [])

    def test_bytes_in_block(self):
        b = bytes(range(48))
        self.assertEqual(b[cryptobreak.blocks.bytes_in_block(16, 0)], bytes(range(16)))
        self.assertEqual(b[cryptobreak.blocks.bytes_in_block(16, 2)], bytes(range(32, 48)))
        self.assertEqual(b[cryptobreak.blocks.bytes_in_block(16, 3)], b"")

    def test_any_equal_block(self):
        f = cryptobreak.blocks.any_equal_block
        self.assertTrue(f(b"A" * 32))
        self.assertFalse(f(b"A" * 16 + b"B" * 16))
        self.assertFalse(f(b""))

    def test_pkcs_7(self):
        b = "YELLOW SUBMARINE".encode("ascii")

        size = 20
        padded = cryptobreak.blocks.pkcs_7(b, size)
        self.assertEqual(len(padded), size)
        self.assertEqual(padded, b + b"\x04" * 4)

        size = 16
        padded = cryptobreak.blocks.pkcs_7(b, size)
        self.assertEqual(len(padded), size * 2)
        self.assertEqual(padded, b + (b"\x10" * size))

        self.assertEqual(cryptobreak.blocks.pkcs_7(b""), b"\x10" * 16)

    def test_un_pkcs_7(self):
        b = "YELLOW SUBMARINE".encode("ascii")

        size = 20
        padded = cryptobreak.blocks.pkcs_7(b, size)
        un_padded = cryptobreak.blocks.un_pkcs_7(padded, size)
        self.assertEqual(b, un_padded)

        size = 16
        padded = cryptobreak.blocks.pkcs_7(b, size)
        un_padded = cryptobreak.blocks.un_pkcs_7(padded, size)
        self.assertEqual(b, un_padded)

        padded = b"ICE ICE BABY\x04\x04\x04\x04"
        un_padded = cryptobreak.blocks.un_pkcs_7(padded, size)
        self.assertEqual(b"ICE ICE BABY", un_padded)

        for padded in (
                b"ICE ICE BABY\x05\x05\x05\x05",
                b"ICE ICE BABY\x01\x02\x03\x04",
                b"ICE ICE BABY\x00\x00\x00\x00",
                b"ICE ICE BABY\x04\x04\x04",
                b"",
        ):
            self.assertRaises(
                cryptobreak.blocks.InvalidPaddingException,
                cryptobreak.blocks.un_pkcs_7,
                padded,
                size
            )

    def test_pkcs_1_5(self):
        size = 128
        message = b"attack at dawn"

        for block_type in (0x01, 0x02):
            padded = cryptobreak.blocks.pkcs_1_5(message, size, block_type)
            self.assertEqual(
                padded.to_bytes(size, "big")[:2],
                bytes((0x00, block_type))
            )
            raw = padded.to_bytes(size, "big")
            self.assertEqual(raw[-len(message) - 1:], b"\x00" + message)
            self.assertNotIn(b"\x00", raw[2:-len(message) - 1])

        self.assertRaises(
            cryptobreak.blocks.LengthMismatchException,
            cryptobreak.blocks.pkcs_1_5,
            b"A" * (size - 10),
            size
        )


class AESTestCase(unittest.TestCase):
    key = b"YELLOW SUBMARINE"

    def test_aes_ecb(self):
        b = b"A" * 16 + b"B" * 16
        ciphertext = cryptobreak.blocks.aes_ecb(self.key, b)

        self.assertEqual(ciphertext, AES.new(self.key, AES.MODE_ECB).encrypt(b))
        self.assertEqual(cryptobreak.blocks.aes_ecb(self.key, ciphertext, decrypt=True), b)

    def test_aes_ecb_padded(self):
        key = cryptobreak.util.random_aes_key()
        for b in (b"", b"foo", b"A" * 16, b"A" * 33):
            ciphertext = cryptobreak.blocks.aes_ecb_encrypt(key, b)
            self.assertEqual(len(ciphertext) % 16, 0)
            self.assertEqual(cryptobreak.blocks.aes_ecb_decrypt(key, ciphertext), b)

    def test_aes_cbc(self):
        iv = bytes(range(16))
        b = b"We all live in a yellow submarine"

        ciphertext = cryptobreak.blocks.aes_cbc_encrypt(self.key, iv, b)
        self.assertEqual(
            ciphertext,
            AES.new(self.key, AES.MODE_CBC, iv).encrypt(cryptobreak.blocks.pkcs_7(b))
        )
        self.assertEqual(cryptobreak.blocks.aes_cbc_decrypt(self.key, iv, ciphertext), b)

    def test_aes_cbc_iv(self):
        b = b"A" * 32
        ciphertext, iv = cryptobreak.blocks.aes_cbc(self.key, b)
        self.assertEqual(iv, b"\x00" * 16)

        ciphertext, iv = cryptobreak.blocks.aes_cbc(self.key, b, random_iv=True)
        self.assertEqual(len(iv), 16)
        self.assertEqual(
            cryptobreak.blocks.aes_cbc(self.key, ciphertext, decrypt=True, iv=iv)[0],
            b
        )

    def test_aes_cbc_bitflip(self):
        iv = b"\x00" * 16
        b = b"A" * 64
        ciphertext = cryptobreak.blocks.aes_cbc_encrypt(self.key, iv, b)

        # Tamper block 1 to rewrite the plaintext of block 2
        delta = b";admin=true;AAAA"
        flipped = ciphertext[:16] + \
            cryptobreak.util.xor(ciphertext[16:32], cryptobreak.util.xor(b"A" * 16, delta)) + \
            ciphertext[32:]
        plaintext = cryptobreak.blocks.aes_cbc_decrypt(self.key, iv, flipped)

        self.assertEqual(len(plaintext), len(b))
        self.assertEqual(plaintext[32:48], delta)
        self.assertNotEqual(plaintext[16:32], b"A" * 16)
        self.assertEqual(plaintext[:16], b"A" * 16)
        self.assertEqual(plaintext[48:], b"A" * 16)

    def test_aes_ctr(self):
        ciphertext = base64.b64decode(
            "L77na/nrFsKvynd6HzOoG7GHTLXsTVu9qvY/2syLXzhPweyyMTJULu/6/kXX0KSvoOLSFQ=="
        )
        plaintext = cryptobreak.blocks.aes_ctr(self.key, ciphertext)

        self.assertTrue(plaintext.startswith(b"Yo, VIP Let's kick it Ice, Ice, baby"))
        self.assertEqual(cryptobreak.blocks.aes_ctr(self.key, plaintext), ciphertext)
        self.assertEqual(cryptobreak.blocks.aes_ctr(self.key, b""), b"")

    def test_aes_ctr_nonce(self):
        nonce = 0x0102030405060708
        b = b"some plaintext that spans more than one block"

        counter = Counter.new(
            64, prefix=nonce.to_bytes(8, "little"),
            initial_value=0, little_endian=True
        )
        self.assertEqual(
            cryptobreak.blocks.aes_ctr(self.key, b, nonce),
            AES.new(self.key, AES.MODE_CTR, counter=counter).encrypt(b)
        )
        self.assertNotEqual(
            cryptobreak.blocks.aes_ctr(self.key, b, nonce),
            cryptobreak.blocks.aes_ctr(self.key, b, nonce + 1)
        )

    def test_length_mismatch(self):
        self.assertRaises(
            cryptobreak.blocks.LengthMismatchException,
            cryptobreak.blocks.aes_ecb,
            b"short key",
            b"A" * 16
        )
        self.assertRaises(
            cryptobreak.blocks.LengthMismatchException,
            cryptobreak.blocks.aes_ecb,
            self.key,
            b"A" * 15
        )
        self.assertRaises(
            cryptobreak.blocks.LengthMismatchException,
            cryptobreak.blocks.aes_cbc,
            self.key,
            b"A" * 16,
            iv=b"short"
        )

    def test_invalid_padding(self):
        ciphertext = cryptobreak.blocks.aes_ecb(self.key, b"A" * 16)
        self.assertRaises(
            cryptobreak.blocks.InvalidPaddingException,
            cryptobreak.blocks.aes_ecb_decrypt,
            self.key,
            ciphertext
        )


if __name__ == '__main__':
    unittest.main()
