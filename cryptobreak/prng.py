#!/usr/bin/env python
# encoding: utf-8

"""
The MT19937 Mersenne Twister, with its internal state exposed
so that it can be cloned from 624 consecutive outputs.
"""

import cryptobreak.util


class MT19937:
    """
    The 32-bit Mersenne Twister PRNG
    (w, n, m, r) = (32, 624, 397, 31).

    :param seed: The PRNG seed, a 32-bit unsigned integer.
    """

    n = 624
    m = 397

    matrix_a = 0x9908b0df
    upper_mask = 0x80000000
    lower_mask = 0x7fffffff

    def __init__(self, seed: int):
        if not 0 <= seed <= 0xffffffff:
            raise ValueError("Seed {} doesn't fit 32 bits.".format(seed))

        self.mt = [seed]
        for i in range(1, self.n):
            previous = self.mt[-1]
            self.mt.append(
                cryptobreak.util.int_32_lsb(1812433253 * (previous ^ previous >> 30) + i)
            )
        self.index = self.n

    @classmethod
    def from_state(cls, state: list, index: int=624):
        """
        Build a generator from an explicit internal state.

        :param state: The 624 words of internal state.
        :param index: The index of the next word to be tempered.
        :return: A new generator, continuing from the given state.
        """
        assert len(state) == cls.n
        assert 0 <= index <= cls.n

        clone = cls(0)
        clone.mt = list(state)
        clone.index = index
        return clone

    @staticmethod
    def temper(y: int) -> int:
        """
        Map a word of internal state to an output.
        """
        y ^= y >> 11
        y ^= (y << 7) & 0x9d2c5680
        y ^= (y << 15) & 0xefc60000
        y ^= y >> 18
        return cryptobreak.util.int_32_lsb(y)

    def twist(self):
        """
        Regenerate the whole internal state.
        """
        mt = self.mt
        for i in range(self.n):
            y = (mt[i] & self.upper_mask) | (mt[(i + 1) % self.n] & self.lower_mask)
            mt[i] = mt[(i + self.m) % self.n] ^ (y >> 1)
            if y & 1:
                mt[i] ^= self.matrix_a
        self.index = 0

    def extract_number(self) -> int:
        """
        :return: The next 32-bit output.
        """
        if self.index >= self.n:
            self.twist()

        y = self.temper(self.mt[self.index])
        self.index += 1
        return y

    def __iter__(self):
        return self

    def __next__(self) -> int:
        return self.extract_number()
