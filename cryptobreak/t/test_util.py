#!/usr/bin/env python
# encoding: utf-8

import cryptobreak.util
import unittest


class UtilTestCase(unittest.TestCase):
    def test_bytes_to_base64(self):
        self.assertEqual(cryptobreak.util.bytes_to_b64(b""), b"")
        self.assertEqual(
            cryptobreak.util.bytes_to_b64(
                bytes.fromhex(
                    "49276d206b696c6c696e6720796f75722062"
                    "7261696e206c696b65206120706f69736f6e"
                    "6f7573206d757368726f6f6d")
            ),
            b"SSdtIGtpbGxpbmcgeW91ciBicmFpbiBsaWtlIGEgcG9pc29ub3VzIG11c2hyb29t"
        )

    def test_xor(self):
        a = bytes.fromhex("1c0111001f010100061a024b53535009181c")
        b = bytes.fromhex("686974207468652062756c6c277320657965")
        c = cryptobreak.util.xor(a, b)
        truth = bytes.fromhex("746865206b696420646f6e277420706c6179")

        self.assertEqual(c, truth)
        self.assertEqual(cryptobreak.util.xor(b"", b""), b"")

    def test_xor_length_mismatch(self):
        self.assertRaises(
            cryptobreak.util.LengthMismatchException,
            cryptobreak.util.xor,
            b"foo",
            b"ba"
        )

    def test_xor_char(self):
        f = cryptobreak.util.xor_char
        p_text = b"foo"

        self.assertEqual(
            p_text,
            f(f(p_text, chr(42)), chr(42))
        )
        self.assertEqual(
            p_text,
            f(p_text, chr(0))
        )
        self.assertEqual(f(p_text, 42), f(p_text, chr(42)))
        self.assertRaises(cryptobreak.util.LengthMismatchException, f, p_text, 256)

        truth = bytes.fromhex(
            "1b37373331363f78151b7f2b783431333d"
            "78397828372d363c78373e783a393b3736"
        )
        p_text = "Cooking MC's like a pound of bacon".encode("ascii")
        k = 'X'

        self.assertEqual(
            f(p_text, k),
            truth
        )

    def test_repeating_xor(self):
        lines = "Burning 'em, if you ain't quick and nimble\n" \
                "I go crazy when I hear a cymbal".encode("ascii")
        key = "ICE".encode("ascii")
        truth = bytes.fromhex("0b3637272a2b2e63622c2e69692a23693a2a3c632420"
                              "2d623d63343c2a26226324272765272"
                              "a282b2f20430a652e2c652a3124333a653e2b2027630"
                              "c692b20283165286326302e27282f")
        self.assertEqual(truth, cryptobreak.util.repeating_xor(lines, key))
        self.assertRaises(
            cryptobreak.util.LengthMismatchException,
            cryptobreak.util.repeating_xor,
            lines,
            b""
        )

    def test_escape_metas(self):
        f = cryptobreak.util.escape_metas
        self.assertEqual(f("foo;admin=true", ";="), "foo\\;admin\\=true")
        self.assertEqual(f("foo", ";="), "foo")
        self.assertEqual(f("a\\b;", ";"), "a\\b\\;")

    def test_key_value(self):
        s = "foo=bar&baz=qux&zap=zazzle"
        d = cryptobreak.util.key_value_parsing(s)

        self.assertEqual(d, {"foo": "bar", "baz": "qux", "zap": "zazzle"})
        self.assertEqual(cryptobreak.util.dictionary_to_kv(d), s)

        self.assertEqual(
            cryptobreak.util.key_value_parsing("a=b=c&junk&d="),
            {"a": "b=c", "d": ""}
        )

    def test_rotate(self):
        self.assertEqual(cryptobreak.util.left_rotate(0x80000001, 1), 0x00000003)
        self.assertEqual(cryptobreak.util.right_rotate(0x00000003, 1), 0x80000001)
        self.assertEqual(cryptobreak.util.left_rotate(0x12345678, 0), 0x12345678)
        self.assertEqual(cryptobreak.util.right_rotate(0x12345678, 0), 0x12345678)
        self.assertEqual(
            cryptobreak.util.right_rotate(cryptobreak.util.left_rotate(0xdeadbeef, 13), 13),
            0xdeadbeef
        )

    def test_endianness(self):
        ints = [0x01020304, 0xa0b0c0d0]
        self.assertEqual(
            bytes(cryptobreak.util.to_big_endian_unsigned_ints(ints)),
            bytes.fromhex("01020304a0b0c0d0")
        )
        self.assertEqual(
            bytes(cryptobreak.util.to_little_endian_unsigned_ints(ints)),
            bytes.fromhex("04030201d0c0b0a0")
        )
        self.assertEqual(
            list(cryptobreak.util.from_big_endian_unsigned_ints(
                bytes.fromhex("01020304a0b0c0d0")
            )),
            ints
        )
        self.assertEqual(
            list(cryptobreak.util.from_little_endian_unsigned_ints(
                bytes.fromhex("04030201d0c0b0a0")
            )),
            ints
        )
        self.assertEqual(
            bytes(cryptobreak.util.to_big_endian_unsigned_longs([8])),
            bytes.fromhex("0000000000000008")
        )
        self.assertRaises(
            cryptobreak.util.LengthMismatchException,
            cryptobreak.util.from_big_endian_unsigned_ints,
            b"\x00" * 5
        )

    def test_bytes_for_int(self):
        f = cryptobreak.util.bytes_for_int
        self.assertEqual(f(0), b"\x00")
        self.assertEqual(f(256), b"\x00\x01")
        self.assertEqual(f(256, byteorder="big"), b"\x01\x00")
        self.assertEqual(f(1, length=4, byteorder="big"), b"\x00\x00\x00\x01")

    def test_random_bytes(self):
        self.assertEqual(len(cryptobreak.util.random_aes_key()), cryptobreak.util.AES_KEY_SIZE)
        self.assertEqual(len(cryptobreak.util.random_bytes_range(7)), 7)
        self.assertEqual(cryptobreak.util.random_bytes_range(0), b"")
        self.assertRaises(cryptobreak.util.LengthMismatchException, cryptobreak.util.random_aes_key, 15)

        for _ in range(10):
            b = cryptobreak.util.random_bytes_random_range(5, 10)
            self.assertTrue(5 <= len(b) <= 10)


if __name__ == '__main__':
    unittest.main()
