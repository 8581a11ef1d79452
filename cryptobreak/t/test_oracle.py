#!/usr/bin/env python
# encoding: utf-8

"""
Test the oracles.
"""

import unittest

import cryptobreak.blocks
import cryptobreak.hash
import cryptobreak.mac
import cryptobreak.oracle
import cryptobreak.prng
import cryptobreak.public
import cryptobreak.util


class OracleTestCase(unittest.TestCase):
    def test_guess_once(self):
        o = cryptobreak.oracle.OracleMT19937Stream()
        self.assertFalse(o.guess(-1))
        self.assertRaises(
            cryptobreak.oracle.CheatingException,
            o.guess,
            -1
        )

    def test_abstract(self):
        self.assertRaises(TypeError, cryptobreak.oracle.Oracle)
        self.assertRaises(TypeError, cryptobreak.oracle.EncryptionOracle)

    def test_aes_ecb_cbc_challenge_once(self):
        o = cryptobreak.oracle.OracleAesEcbCbc()
        ciphertext = o.challenge(b"foo")
        self.assertEqual(len(ciphertext) % cryptobreak.blocks.BLOCK_SIZE, 0)
        self.assertRaises(
            cryptobreak.oracle.CheatingException,
            o.challenge,
            b"foo"
        )

    def test_byte_at_a_time_encrypt(self):
        o = cryptobreak.oracle.OracleByteAtATimeEcb(b"hidden")
        self.assertEqual(len(o.encrypt(b"")), 16)
        self.assertEqual(len(o.encrypt(b"A" * 10)), 32)
        self.assertEqual(o.encrypt(b"A" * 10), o.encrypt(b"A" * 10))
        self.assertTrue(o.guess(b"hidden"))

    def test_build_profile(self):
        f = cryptobreak.oracle.OracleProfileForUser.build_profile
        self.assertEqual(f("foo@bar.com"), "email=foo@bar.com&uid=10&role=user")
        self.assertEqual(
            f("foo&role=admin@bar.com"),
            "email=fooroleadmin@bar.com&uid=10&role=user"
        )
        self.assertRaises(AssertionError, f, "foo@bar@baz.com")

    def test_profile_not_admin(self):
        o = cryptobreak.oracle.OracleProfileForUser()
        self.assertFalse(o.guess(o.encrypt(b"foo@bar.com")))

    def test_bitflipping_escapes(self):
        for mode in ("cbc", "ctr"):
            o = cryptobreak.oracle.OracleBitflipping(mode)
            self.assertFalse(o.guess(o.encrypt(b";admin=true;")))

    def test_bitflipping_malformed(self):
        o = cryptobreak.oracle.OracleBitflipping("cbc")
        self.assertFalse(o.guess(b"A" * 17))

    def test_is_admin(self):
        o = cryptobreak.oracle.OracleProfileForUser()
        ciphertext = o.encrypt(b"foo@bar.com")
        self.assertFalse(o.is_admin(ciphertext))
        self.assertFalse(o.is_admin(ciphertext[:-1]))

        o = cryptobreak.oracle.OracleBitflipping("ctr")
        ciphertext = o.encrypt(b"A" * 12)
        self.assertFalse(o.is_admin(ciphertext))

        # Repeated queries don't count as guesses
        self.assertFalse(o.is_admin(ciphertext))
        self.assertFalse(o.guess(ciphertext))
        self.assertRaises(cryptobreak.oracle.CheatingException, o.guess, ciphertext)
        self.assertIsInstance(o, cryptobreak.oracle.AdminCheckOracle)

    def test_cbc_padding(self):
        o = cryptobreak.oracle.OracleCBCPadding([b"a hidden string"])
        ciphertext, iv = o.challenge()

        self.assertTrue(o.check_padding(iv, ciphertext))

        tampered = bytearray(iv)
        tampered[-1] ^= 0x01 ^ 0x02
        self.assertFalse(o.check_padding(bytes(tampered), ciphertext))
        self.assertTrue(o.guess(b"a hidden string"))

    def test_fixed_nonce_ctr(self):
        o = cryptobreak.oracle.OracleFixedNonceCTR([b"foo bar", b"baz"])
        one, two = o.challenge()

        self.assertEqual(
            cryptobreak.util.xor(one[:3], two),
            cryptobreak.util.xor(b"foo", b"baz")
        )
        self.assertTrue(o.guess((b"FOO whatever", b"baz")))

    def test_random_access_ctr(self):
        o = cryptobreak.oracle.OracleRandomAccessCTR(b"some plaintext")
        ciphertext = o.challenge()

        edited = o.edit(ciphertext, 5, b"PLAIN")
        self.assertEqual(edited[:5], ciphertext[:5])
        self.assertNotEqual(edited, ciphertext)
        self.assertEqual(o.edit(edited, 5, b"plain"), ciphertext)

        self.assertRaises(
            cryptobreak.util.LengthMismatchException,
            o.edit,
            ciphertext,
            10,
            b"too long"
        )

    def test_cbc_key_iv(self):
        o = cryptobreak.oracle.OracleCBCKeyIV()
        ciphertext = o.challenge()
        self.assertEqual(len(ciphertext), 48)
        self.assertTrue(all(c < 128 for c in o.decrypt(ciphertext)))

    def test_mt19937_seed(self):
        o = cryptobreak.oracle.OracleMT19937Seed(now=1000000, wait_min=40, wait_max=1000)
        output, now = o.challenge()
        self.assertTrue(1000080 <= now <= 1002000)
        self.assertTrue(0 <= output <= 0xffffffff)

    def test_mt19937_clone(self):
        o = cryptobreak.oracle.OracleMT19937Clone()
        self.assertEqual(len(o.challenge()), cryptobreak.prng.MT19937.n)
        self.assertFalse(o.guess([-1]))

    def test_keyed_mac(self):
        o = cryptobreak.oracle.OracleSHA1KeyedMac(b"KEY")
        message, mac = o.challenge()

        self.assertEqual(mac, cryptobreak.mac.sha1_secret_prefix(b"KEY", message))
        self.assertTrue(o.forge_check(message, mac))
        self.assertRaises(
            cryptobreak.oracle.CheatingException,
            o.guess,
            message,
            mac
        )

    def test_unpadded_rsa(self):
        o = cryptobreak.oracle.OracleUnpaddedRSARecovery(bits=512)
        c, pub = o.challenge()

        self.assertRaises(
            cryptobreak.oracle.CheatingException,
            o.decrypt,
            c
        )
        o.decrypt(2)
        self.assertRaises(
            cryptobreak.oracle.CheatingException,
            o.decrypt,
            2
        )

    def test_rsa_broadcast(self):
        o = cryptobreak.oracle.OracleRSABroadcast(bits=512)
        ciphertexts, public_keys = o.challenge()

        self.assertEqual(len(ciphertexts), 3)
        self.assertTrue(all(pub.e == 3 for pub in public_keys))
        self.assertEqual(len({pub.n for pub in public_keys}), 3)

    def test_rsa_parity(self):
        o = cryptobreak.oracle.OracleRSAParity(message=b"\x02", bits=512)
        c, _ = o.challenge()
        self.assertTrue(o.is_plaintext_even(c))

    def test_padded_signature_verifier(self):
        o = cryptobreak.oracle.OracleRSAPaddedSignatureVerifier()
        message, pub = o.challenge()

        self.assertEqual(message, b"hi mom")
        self.assertFalse(o.forge_check(message, 2))
        self.assertFalse(o.forge_check(message, pub.n))

    def test_dsa(self):
        pub, priv = cryptobreak.public.dsa_keys()
        o = cryptobreak.oracle.OracleDSA(pub)
        self.assertEqual(o.challenge(), pub)
        self.assertTrue(o.guess(priv.x))

    def test_dsa_repeated_nonce(self):
        o = cryptobreak.oracle.OracleDSAKeyFromRepeatedNonce()
        signatures = o.challenge()

        self.assertEqual(len(signatures), len(o.default_messages))
        self.assertLess(len({s.r for s in signatures}), len(signatures))
        for s in signatures:
            self.assertTrue(
                cryptobreak.public.dsa_verify(
                    o.public_key, s.msg, cryptobreak.public.DSA_Signature(s.r, s.s)
                )
            )

    def test_dh_small_subgroup(self):
        o = cryptobreak.oracle.OracleDHSmallSubgroup(q_bits=24, factor_bound=2 ** 8)
        p, g, q, y = o.challenge()

        self.assertEqual(pow(y, q, p), 1)
        message, tag = o.exchange(g)
        self.assertEqual(len(tag), 32)
        self.assertRaises(
            cryptobreak.public.InvalidKeyMaterialException,
            o.exchange,
            1
        )
        self.assertRaises(
            cryptobreak.public.InvalidKeyMaterialException,
            o.exchange,
            p
        )


if __name__ == '__main__':
    unittest.main()
