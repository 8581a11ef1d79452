#!/usr/bin/env python
# encoding: utf-8

import functools
import operator
import unittest

import cryptobreak.hash
import cryptobreak.math
import cryptobreak.public
import cryptobreak.util


class DHTestCase(unittest.TestCase):
    def test_dh(self):
        f = cryptobreak.public.dh_keys
        p = 23
        g = 5

        _, _, priv, pub = f(p=p, g=g)
        self.assertEqual(
            pow(g, priv, p), pub
        )

    def test_dh_default(self):
        f = cryptobreak.public.dh_keys

        p, g, priv, pub = f()
        self.assertEqual(
            pow(g, priv, p), pub
        )

    def test_dh_shared_secret(self):
        _, _, a, pub_a = cryptobreak.public.dh_keys()
        p, _, b, pub_b = cryptobreak.public.dh_keys()

        self.assertEqual(
            cryptobreak.public.dh_shared_secret(pub_b, a, p),
            cryptobreak.public.dh_shared_secret(pub_a, b, p)
        )

    def test_dh_bad_modulus(self):
        self.assertRaises(
            cryptobreak.public.InvalidKeyMaterialException,
            cryptobreak.public.dh_keys,
            p=3
        )

    def test_dh_protocol(self):
        alice = cryptobreak.public.DHEntity()
        bob = cryptobreak.public.DHEntity()

        alice.dh_protocol(bob)
        self.assertEqual(
            alice._session_key,
            bob._session_key
        )

    def test_dh_protocol_bad_g(self):
        alice = cryptobreak.public.DHEntity()
        bob = cryptobreak.public.DHEntity()

        alice.dh_protocol(
            bob,
            p=cryptobreak.public.dh_nist_p,
            g=cryptobreak.public.dh_nist_p - 1
        )
        self.assertEqual(
            alice._session_key,
            bob._session_key
        )

    def test_dh_message(self):
        alice = cryptobreak.public.DHEntity()
        bob = cryptobreak.public.DHEntity()
        alice.dh_protocol(bob)

        message = b"MessageInABottle"
        answer = alice.send_and_receive(bob, message)
        self.assertEqual(
            message,
            answer
        )

    def test_dh_ack_message(self):
        alice = cryptobreak.public.DHAckEntity()
        bob = cryptobreak.public.DHAckEntity()
        alice.dh_protocol(bob)

        message = b"MessageInABottle"
        answer = alice.send_and_receive(bob, message)
        self.assertEqual(
            message,
            answer
        )

    def test_dh_ack_not_acknowledged(self):
        bob = cryptobreak.public.DHAckEntity()
        self.assertRaises(
            cryptobreak.public.InvalidKeyMaterialException,
            bob.dh_protocol_respond,
            23, 5, 8
        )

    def test_small_subgroup_group(self):
        p, g, q = cryptobreak.public.dh_small_subgroup_group(q_bits=24, factor_bound=2 ** 8)

        self.assertTrue(cryptobreak.math.is_prime(p))
        self.assertTrue(cryptobreak.math.is_prime(q))
        self.assertEqual((p - 1) % q, 0)
        self.assertNotEqual(g, 1)
        self.assertEqual(pow(g, q, p), 1)

        j = (p - 1) // q
        self.assertGreater(
            functools.reduce(
                operator.mul,
                cryptobreak.math.small_factors(j, bound=j + 1)[1:]
            ),
            q
        )


class RSATestCase(unittest.TestCase):
    def test_rsa(self):
        pub, priv = cryptobreak.public.rsa_keys(bits=512)
        message = b"attack at dawn"

        c = cryptobreak.public.rsa_encrypt(pub, message)
        self.assertNotEqual(c, int.from_bytes(message, "big"))
        self.assertEqual(cryptobreak.public.rsa_decrypt(priv, c), message)

    def test_rsa_too_long(self):
        pub, _ = cryptobreak.public.rsa_keys(bits=512)
        self.assertRaises(
            cryptobreak.util.LengthMismatchException,
            cryptobreak.public.rsa_encrypt,
            pub,
            b"\xff" * 64
        )

    def test_rsa_bad_exponent(self):
        # fi(n) = 4 * 10 = 40, not invertible mod 5
        self.assertRaises(
            cryptobreak.public.InvalidKeyMaterialException,
            cryptobreak.public.rsa_keys,
            p=5, q=11, e=5
        )
        self.assertRaises(
            cryptobreak.public.InvalidKeyMaterialException,
            cryptobreak.public.rsa_keys,
            p=11, q=11, e=3
        )

    def test_rsa_signature(self):
        pub, priv = cryptobreak.public.rsa_keys(bits=1024)
        message = b"hi mom"

        signature = cryptobreak.public.rsa_sign(priv, message)
        self.assertTrue(cryptobreak.public.rsa_verify(pub, message, signature))
        self.assertFalse(cryptobreak.public.rsa_verify(pub, b"hi dad", signature))
        self.assertFalse(cryptobreak.public.rsa_verify(pub, message, signature + 1))
        self.assertFalse(cryptobreak.public.rsa_verify(pub, message, 0))


class DSATestCase(unittest.TestCase):
    def test_dsa(self):
        pub, priv = cryptobreak.public.dsa_keys()
        message = b"Yet another message."

        signature = cryptobreak.public.dsa_sign(priv, message)
        self.assertTrue(cryptobreak.public.dsa_verify(pub, message, signature))
        self.assertFalse(cryptobreak.public.dsa_verify(pub, b"Another message.", signature))

    def test_dsa_out_of_range(self):
        pub, _ = cryptobreak.public.dsa_keys()
        self.assertRaises(
            cryptobreak.public.InvalidKeyMaterialException,
            cryptobreak.public.dsa_verify,
            pub,
            b"message",
            cryptobreak.public.DSA_Signature(0, 1)
        )

    def test_dsa_x_from_k(self):
        pub, priv = cryptobreak.public.dsa_keys()
        message = b"Yet another message."
        k = 12345

        signature = cryptobreak.public.dsa_sign(priv, message, k=k)
        h = cryptobreak.public.DSA_hash_to_int(cryptobreak.hash.SHA1(message))

        self.assertEqual(
            cryptobreak.public.dsa_x_from_k(k, h, signature, pub.q),
            priv.x
        )

    def test_dsa_bad_generator(self):
        self.assertRaises(
            cryptobreak.public.InvalidKeyMaterialException,
            cryptobreak.public.dsa_keys,
            g=0
        )

    def test_dsa_composite_order(self):
        f = cryptobreak.public.InvalidKeyMaterialException
        self.assertRaises(f, cryptobreak.public.dsa_keys, p=23, q=4, g=2)
        self.assertRaises(f, cryptobreak.public.dsa_keys, p=23, q=1, g=2)
        self.assertRaises(f, cryptobreak.public.dsa_keys, p=23, q=7, g=2)

        pub = cryptobreak.public.DSA_Pub(2, 23, 4, 2)
        self.assertRaises(
            f,
            cryptobreak.public.dsa_verify,
            pub,
            b"message",
            cryptobreak.public.DSA_Signature(1, 2)
        )

    def test_dsa_small_group(self):
        # 11 divides 23 - 1, 4 has order 11 mod(23)
        pub, priv = cryptobreak.public.dsa_keys(p=23, q=11, g=4)
        self.assertEqual(pow(4, priv.x, 23), pub.y)


class SRPTestCase(unittest.TestCase):
    def test_srp(self):
        password = b"A simple secret password."
        server = cryptobreak.public.SRPServer(password)
        client = cryptobreak.public.SRPClient(password, server)

        self.assertTrue(client.srp_protocol())

    def test_srp_wrong_password(self):
        server = cryptobreak.public.SRPServer(b"A simple secret password.")
        client = cryptobreak.public.SRPClient(b"Not the password.", server)

        self.assertFalse(client.srp_protocol())

    def test_srp_fake_a(self):
        server = cryptobreak.public.SRPServer(b"A simple secret password.")

        for i in range(3):
            client = cryptobreak.public.SRPClientFakeA(
                server, A=i * cryptobreak.public.dh_nist_p
            )
            self.assertTrue(client.srp_protocol())

        self.assertRaises(
            cryptobreak.public.InvalidKeyMaterialException,
            cryptobreak.public.SRPClientFakeA,
            server,
            A=1
        )


if __name__ == '__main__':
    unittest.main()
