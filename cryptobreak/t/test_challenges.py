#!/usr/bin/env python
# encoding: utf-8

"""
Run every registered challenge.
"""

import contextlib
import io
import unittest

import cryptobreak.attacker
import cryptobreak.challenges

"""
Brute-forcing challenges, skipped by default.
"""
slow_challenges = frozenset((22, 24, 43, 57))


class ChallengeTestCase(unittest.TestCase):

    def run_challenge(self, number: int):
        with contextlib.redirect_stdout(io.StringIO()) as output:
            result = cryptobreak.challenges.challenges[number]()

        self.assertTrue(result, output.getvalue())
        self.assertIn("completed", output.getvalue())


def _add_challenge_test(number: int):
    def test(self):
        self.run_challenge(number)

    if number in slow_challenges:
        test = unittest.skip("Slow challenge")(test)
    setattr(ChallengeTestCase, "test_challenge_{:02d}".format(number), test)


for _number in cryptobreak.challenges.challenges:
    _add_challenge_test(_number)


class RegistryTestCase(unittest.TestCase):

    def test_registered(self):
        numbers = list(cryptobreak.challenges.challenges)
        self.assertEqual(numbers, sorted(numbers))
        self.assertIn(1, numbers)
        self.assertIn(57, numbers)
        self.assertNotIn(20, numbers)

    def test_duplicate_number(self):
        self.assertRaises(
            AssertionError,
            cryptobreak.challenges.challenge(1),
            lambda: True
        )

    def test_exhausted_attack_fails(self):
        def exhausted():
            raise cryptobreak.attacker.AttackExhaustedException("Nothing left.")

        run = cryptobreak.challenges.challenge(-1)(exhausted)
        try:
            with contextlib.redirect_stdout(io.StringIO()) as output:
                self.assertFalse(run())
        finally:
            del cryptobreak.challenges.challenges[-1]

        self.assertIn("Nothing left.", output.getvalue())
        self.assertIn("failed", output.getvalue())


class MainTestCase(unittest.TestCase):

    def test_main(self):
        with contextlib.redirect_stdout(io.StringIO()):
            self.assertEqual(cryptobreak.challenges.main(["1"]), 0)

    def test_main_missing_challenge(self):
        with contextlib.redirect_stderr(io.StringIO()):
            self.assertRaises(SystemExit, cryptobreak.challenges.main, ["20"])
            self.assertRaises(SystemExit, cryptobreak.challenges.main, ["100"])
            self.assertRaises(SystemExit, cryptobreak.challenges.main, ["one"])


if __name__ == '__main__':
    unittest.main()
