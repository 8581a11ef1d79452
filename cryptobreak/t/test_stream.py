#!/usr/bin/env python
# encoding: utf-8

"""Test stream crypto."""

import unittest
import random

import cryptobreak.prng
import cryptobreak.stream


class StreamTestCase(unittest.TestCase):

    def test_mt19937_stream(self):
        f = cryptobreak.stream.mt19937_stream
        key = random.randint(0, 2 ** 32 - 1)
        b = "00foobarfoobar00".encode("ascii")

        cipher = f(key, b)
        self.assertEqual(len(cipher), len(b))
        self.assertEqual(f(key, cipher), b)
        self.assertEqual(f(key, b""), b"")

    def test_mt19937_keystream(self):
        f = cryptobreak.stream.mt19937_keystream
        mt_prng = cryptobreak.prng.MT19937(5489)
        first = mt_prng.extract_number().to_bytes(4, 'big')
        second = mt_prng.extract_number().to_bytes(4, 'big')

        self.assertEqual(f(5489, 6), first + second[:2])
        self.assertEqual(f(5489, 0), b"")


class MT19937TestCase(unittest.TestCase):

    def test_reference_outputs(self):
        mt_prng = cryptobreak.prng.MT19937(5489)
        self.assertEqual(
            [mt_prng.extract_number() for _ in range(5)],
            [3499211612, 581869302, 3890346734, 3586334585, 545404204]
        )

    def test_determinism(self):
        a = cryptobreak.prng.MT19937(42)
        b = cryptobreak.prng.MT19937(42)
        c = cryptobreak.prng.MT19937(43)

        outputs_a = [next(a) for _ in range(1000)]
        self.assertEqual(outputs_a, [next(b) for _ in range(1000)])
        self.assertNotEqual(outputs_a, [next(c) for _ in range(1000)])

    def test_from_state(self):
        mt_prng = cryptobreak.prng.MT19937(1234)
        for _ in range(700):
            mt_prng.extract_number()

        clone = cryptobreak.prng.MT19937.from_state(mt_prng.mt, mt_prng.index)
        self.assertEqual(
            [next(mt_prng) for _ in range(1000)],
            [next(clone) for _ in range(1000)]
        )

    def test_outputs_are_32_bits(self):
        mt_prng = cryptobreak.prng.MT19937(0xffffffff)
        for _ in range(1000):
            self.assertTrue(0 <= mt_prng.extract_number() <= 0xffffffff)


if __name__ == '__main__':
    unittest.main()
