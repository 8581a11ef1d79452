#!/usr/bin/env python
# encoding: utf-8

"""
Diffie-Hellman, RSA, DSA and SRP on plain Python ints.
Modular exponentiations go through cryptobreak.math.mod_pow,
bad parameters raise InvalidKeyMaterialException.
"""

import collections
import hmac
import logging
import random

import cryptobreak.hash
import cryptobreak.blocks
import cryptobreak.util
import cryptobreak.mac
import cryptobreak.math

logger = logging.getLogger(__name__)


InvalidKeyMaterialException = cryptobreak.math.InvalidKeyMaterialException


"""
The 1536 bits MODP prime and its generator.
"""
dh_nist_p = int(
    "ffffffffffffffffc90fdaa22168c234c4c6628b80dc1cd129024e088a67cc74"
    "020bbea63b139b22514a08798e3404ddef9519b3cd3a431b302b0a6df25f1437"
    "4fe1356d6d51c245e485b576625e7ec6f44c42e9a637ed6b0bff5cb6f406b7ed"
    "ee386bfb5a899fa5ae9f24117c4b1fe649286651ece45b3dc2007cb8a163bf05"
    "98da48361c55d39a69163fa8fd24cf5f83655d23dca3ad961c62f356208552bb"
    "9ed529077096966d670c354e4abc9804f1746c08ca237327ffffffffffffffff",
    16
)
dh_nist_g = 2


def dh_keys(p: int=dh_nist_p, g: int=dh_nist_g) -> tuple:
    """
    :param p: The group modulo, at least 5.
    :param g: A primitive root of p.
    :return: p, g, a fresh private key in [1, p - 2] and its public key.
    """
    if p < 5:
        raise InvalidKeyMaterialException("Bad DH modulus {}.".format(p))

    private_key = random.randint(1, p - 2)
    return p, g, private_key, cryptobreak.math.mod_pow(g, private_key, p)


def dh_shared_secret(public_key: int, private_key: int, p: int) -> int:
    """
    Derive the DH shared secret.

    :param public_key: The other party's public key.
    :param private_key: Our private key.
    :param p: The group modulo.
    :return: The shared secret.
    """
    if p < 2:
        raise InvalidKeyMaterialException("Bad DH modulus {}.".format(p))
    return cryptobreak.math.mod_pow(public_key, private_key, p)


def dh_small_subgroup_group(
        q_bits: int=40,
        factor_bound: int=2 ** 10
) -> tuple:
    """
    Generate a DH group p = q * j + 1 where q is prime,
    and j is an even number whose odd prime factors
    are all smaller than factor_bound.
    Their product is greater than q.

    :param q_bits: The size of q, in bits.
    :param factor_bound: The bound of the prime factors of j.
    :return: p, g (of order q) and q.
    """
    small_primes = [
        r for r in range(3, factor_bound)
        if cryptobreak.math.is_prime(r)
    ]

    q = cryptobreak.math.random_big_prime(q_bits)
    while True:
        random.shuffle(small_primes)
        j, product = 2, 1
        for r in small_primes:
            if product > q:
                break
            j *= r
            product *= r

        if product <= q:
            raise InvalidKeyMaterialException(
                "Factor bound {} is too small for {} bits.".format(factor_bound, q_bits)
            )

        p = q * j + 1
        if cryptobreak.math.is_prime(p):
            break

    g = 1
    while g == 1:
        g = cryptobreak.math.mod_pow(random.randint(2, p - 2), j, p)

    logger.debug("Generated group with p of %d bits.", p.bit_length())
    return p, g, q


class DHEntity:
    """
    A party of a Diffie-Hellman exchange, over which
    it then swaps messages, echoed back by the receiver.

    Each message travels as AES_CBC(key, iv, message) || iv
    where key is the first 16 bytes of SHA1(session key).
    """

    @staticmethod
    def session_key_to_16_aes_bytes(k: int) -> bytes:
        """
        :param k: A DH session key.
        :return: The AES key derived from it.
        """
        assert k >= 0
        return cryptobreak.hash.SHA1(cryptobreak.util.bytes_for_int(k))[:cryptobreak.util.AES_KEY_SIZE]

    @staticmethod
    def decipher_received_message(k: bytes, ciphertext: bytes) -> bytes:
        """
        :param k: The AES key.
        :param ciphertext: The ciphertext, IV last.
        :raises InvalidPaddingException: If the wrong key has been used.
        """
        bs = cryptobreak.blocks.BLOCK_SIZE
        return cryptobreak.blocks.aes_cbc_decrypt(k, ciphertext[-bs:], ciphertext[:-bs])

    @staticmethod
    def encipher_message(k: bytes, message: bytes) -> bytes:
        """
        :param k: The AES key.
        :param message: The plaintext.
        :return: The ciphertext under a fresh IV, IV last.
        """
        iv = cryptobreak.util.random_bytes_range(cryptobreak.blocks.BLOCK_SIZE)
        return cryptobreak.blocks.aes_cbc_encrypt(k, iv, message) + iv

    def __init__(self):
        self._keys = None
        self._session_key = -1  # no exchange yet

    @property
    def _aes_key(self) -> bytes:
        return DHEntity.session_key_to_16_aes_bytes(self._session_key)

    def dh_protocol(self, receiver, p: int=None, g: int=None):
        """
        Start an exchange with receiver, on a fresh pair of keys.

        :param receiver: The other party.
        :param p: The group modulo (the NIST one if None).
        :param g: A primitive root of p (2 if None).
        """
        assert receiver and receiver is not self

        p, g, a, pub_a = self._keys = dh_keys(p or dh_nist_p, g or dh_nist_g)
        pub_b = receiver.dh_protocol_respond(p, g, pub_a)
        self._session_key = dh_shared_secret(pub_b, a, p)

    def dh_protocol_respond(self, p: int, g: int, pub_a: int) -> int:
        """
        Answer an exchange started by the other party.

        :param pub_a: The other party public key.
        :return: Our fresh public key.
        """
        _, _, b, pub_b = self._keys = dh_keys(p, g)
        self._session_key = dh_shared_secret(pub_a, b, p)
        return pub_b

    def send_and_receive(self, receiver, message: bytes) -> bytes:
        """
        :param receiver: The other party of the exchange.
        :param message: The plaintext to be sent.
        :return: The receiver's answer, decrypted.
        """
        key = self._aes_key
        answer = receiver.receive_and_send_back(DHEntity.encipher_message(key, message))
        return DHEntity.decipher_received_message(key, answer)

    def receive_and_send_back(self, ciphertext: bytes) -> bytes:
        """
        Echo the received message, re-encrypted under a fresh IV.
        """
        key = self._aes_key
        return DHEntity.encipher_message(
            key, DHEntity.decipher_received_message(key, ciphertext)
        )


class DHAckEntity(DHEntity):
    """
    A DH party that first agrees on the group:
    the initiator sends (p, g), the receiver stores and acknowledges them,
    and only answers exchanges on that group.
    """

    def __init__(self):
        super(DHAckEntity, self).__init__()
        self._p, self._g = dh_nist_p, dh_nist_g

    def set_group_parameters(self, p: int, g: int):
        """
        :return: True, the acknowledgement.
        """
        self._p, self._g = p, g
        return True

    def dh_protocol(self, receiver, p: int=None, g: int=None):
        p, g = p or dh_nist_p, g or dh_nist_g
        receiver.set_group_parameters(p, g)
        super(DHAckEntity, self).dh_protocol(receiver, p, g)

    def dh_protocol_respond(self, p: int, g: int, pub_a: int) -> int:
        """
        :raise InvalidKeyMaterialException: If (p, g) isn't the acknowledged group.
        """
        if (p, g) != (self._p, self._g):
            raise InvalidKeyMaterialException("Group parameters were not acknowledged.")
        return super(DHAckEntity, self).dh_protocol_respond(p, g, pub_a)


"""
RSA keys.
"""
RSA_Pub = collections.namedtuple("RSA_Pub", ["e", "n"])
RSA_Priv = collections.namedtuple("RSA_Priv", ["d", "n"])
RSA_Keys = collections.namedtuple("RSA_Keys", ["pub", "priv"])

"""
The DER encoding of the SHA1 AlgorithmIdentifier,
prefixed to the digest in PKCS#1 v1.5 signatures.
"""
sha1_digest_info = bytes.fromhex("3021300906052b0e03021a05000414")


def rsa_byte_size(n: int) -> int:
    """
    :param n: An RSA modulus.
    :return: The number of bytes required to represent n.
    """
    return (n.bit_length() + 7) // 8


def rsa_keys(p: int=None, q: int=None, e: int=3, bits: int=1024) -> RSA_Keys:
    """
    Generate a new pair of RSA keys.

    :param p: A prime (generated if None).
    :param q: Another prime (generated if None).
    :param e: The public exponent.
    :param bits: The size of the modulus, if p and q must be generated.
    :return: The public and the private keys.
    :raises InvalidKeyMaterialException: If e is not invertible mod fi(n).
    """
    if p is None:
        p = cryptobreak.math.random_big_prime(bits // 2, e)
    if q is None:
        q = cryptobreak.math.random_big_prime(bits // 2, e)
        while q == p:
            q = cryptobreak.math.random_big_prime(bits // 2, e)

    if p == q:
        raise InvalidKeyMaterialException("RSA primes must be distinct.")

    n = p * q
    et = (p - 1) * (q - 1)
    try:
        d = cryptobreak.math.modinv(e, et)
    except InvalidKeyMaterialException as ex:
        raise InvalidKeyMaterialException(
            "Public exponent {} is not invertible.".format(e)
        ) from ex

    return RSA_Keys(RSA_Pub(e, n), RSA_Priv(d, n))


def rsa_encrypt(pub: RSA_Pub, message: bytes) -> int:
    """
    Textbook (unpadded) RSA encryption.

    :param pub: The public key.
    :param message: The message, read as a big endian integer.
    :return: The ciphertext.
    """
    m = int.from_bytes(message, byteorder="big")
    if m >= pub.n:
        raise cryptobreak.util.LengthMismatchException(
            "Message is too long for a {} bits modulus.".format(pub.n.bit_length())
        )
    return cryptobreak.math.mod_pow(m, pub.e, pub.n)


def rsa_decrypt(priv: RSA_Priv, ciphertext: int) -> bytes:
    """
    Textbook (unpadded) RSA decryption.

    :param priv: The private key.
    :param ciphertext: The ciphertext.
    :return: The message (leading zeroes are lost).
    """
    if not 0 <= ciphertext < priv.n:
        raise InvalidKeyMaterialException("Ciphertext out of range.")
    return cryptobreak.util.bytes_for_int(
        cryptobreak.math.mod_pow(ciphertext, priv.d, priv.n),
        byteorder="big"
    )


def _rsa_signature_block(message: bytes, n: int, hash_function) -> int:
    return cryptobreak.blocks.pkcs_1_5(
        sha1_digest_info + hash_function(message),
        rsa_byte_size(n)
    )


def rsa_sign(
        priv: RSA_Priv,
        message: bytes,
        hash_function=cryptobreak.hash.SHA1
) -> int:
    """
    PKCS#1 v1.5 RSA signature.

    :param priv: The private key.
    :param message: The message to be signed.
    :param hash_function: The hash function.
    :return: The signature.
    """
    return cryptobreak.math.mod_pow(
        _rsa_signature_block(message, priv.n, hash_function),
        priv.d,
        priv.n
    )


def rsa_verify(
        pub: RSA_Pub,
        message: bytes,
        signature: int,
        hash_function=cryptobreak.hash.SHA1
) -> bool:
    """
    Strictly verify a PKCS#1 v1.5 RSA signature:
    the whole block must match the expected one.

    :param pub: The public key.
    :param message: The signed message.
    :param signature: The signature.
    :param hash_function: The hash function.
    :return: True if the signature is valid.
    """
    if not 0 < signature < pub.n:
        return False

    return cryptobreak.math.mod_pow(signature, pub.e, pub.n) == \
        _rsa_signature_block(message, pub.n, hash_function)


"""
DSA keys and signatures.
"""
DSA_Pub = collections.namedtuple("DSA_Pub", ["y", "p", "q", "g"])
DSA_Priv = collections.namedtuple("DSA_Priv", ["x", "p", "q", "g"])
DSA_Keys = collections.namedtuple("DSA_Keys", ["pub", "priv"])
DSA_Signature = collections.namedtuple("DSA_Signature", ["r", "s"])

"""
The published DSA group parameters.
"""
dsa_p = int(
    """800000000000000089e1855218a0e7dac38136ffafa72eda7"""
    """859f2171e25e65eac698c1702578b07dc2a1076da241c76c6"""
    """2d374d8389ea5aeffd3226a0530cc565f3bf6b50929139ebe"""
    """ac04f48c3c84afb796d61e5a4f9a8fda812ab59494232c7d2"""
    """b4deb50aa18ee9e132bfa85ac4374d7f9091abc3d015efc87"""
    """1a584471bb1""",
    base=16
)

dsa_q = int(
    """f4f47f05794b256174bba6e9b396a7707e563c5b""",
    base=16
)

dsa_g = int(
    """5958c9d3898b224b12672c0b98e06c60df923cb8bc999d119"""
    """458fef538b8fa4046c8db53039db620c094c9fa077ef389b5"""
    """322a559946a71903f990f1f7e0e025e2d7f7cf494aff1a047"""
    """0f5b64c36b625a097f1651fe775323556fe00b3608c887892"""
    """878480e99041be601a62166ca6894bdd41a7054ec89f756ba"""
    """9fc95302291""",
    base=16
)


def DSA_hash_to_int(digest: bytes) -> int:
    """
    Convert a message digest to the integer used by DSA.

    :param digest: The digest.
    :return: The big endian integer of the digest.
    """
    return int.from_bytes(digest, byteorder="big")


def _check_dsa_group(p: int, q: int, g: int):
    """
    :raise InvalidKeyMaterialException: If q is not a prime dividing p - 1,
        or if g is not a proper element of the group.
    """
    if not cryptobreak.math.is_prime(q) or p <= q or (p - 1) % q:
        raise InvalidKeyMaterialException("Bad DSA subgroup order {}.".format(q))
    if g <= 1 or g >= p:
        raise InvalidKeyMaterialException("Bad DSA generator.")


def dsa_keys(p: int=dsa_p, q: int=dsa_q, g: int=dsa_g) -> DSA_Keys:
    """
    Generate a new pair of DSA keys.

    :param p: The group modulo.
    :param q: The subgroup order.
    :param g: The subgroup generator.
    :return: The public and the private keys.
    """
    _check_dsa_group(p, q, g)

    x = random.randint(1, q - 1)
    y = cryptobreak.math.mod_pow(g, x, p)
    return DSA_Keys(DSA_Pub(y, p, q, g), DSA_Priv(x, p, q, g))


def dsa_sign(
        priv: DSA_Priv,
        message: bytes,
        k: int=None,
        hash_function=cryptobreak.hash.SHA1
) -> DSA_Signature:
    """
    Sign the message.

    :param priv: The private key.
    :param message: The message.
    :param k: The nonce, random if None.
    :param hash_function: The hash function.
    :return: The DSA signature.
    :raises InvalidKeyMaterialException: If the given nonce produces a degenerate signature.
    """
    x, p, q, g = priv
    _check_dsa_group(p, q, g)
    h = DSA_hash_to_int(hash_function(message))

    while True:
        _k = k if k is not None else random.randint(1, q - 1)
        r = cryptobreak.math.mod_pow(g, _k, p) % q
        s = (cryptobreak.math.modinv(_k, q) * (h + x * r)) % q if r else 0

        if r and s:
            return DSA_Signature(r, s)
        if k is not None:
            raise InvalidKeyMaterialException("Nonce {} is degenerate.".format(k))


def dsa_verify(
        pub: DSA_Pub,
        message: bytes,
        signature: DSA_Signature,
        hash_function=cryptobreak.hash.SHA1
) -> bool:
    """
    Verify a DSA signature.

    :param pub: The public key.
    :param message: The message.
    :param signature: The signature.
    :param hash_function: The hash function.
    :return: True if the signature is valid.
    :raises InvalidKeyMaterialException: On a malformed group, or if r or s are out of range.
    """
    y, p, q, g = pub
    r, s = signature

    _check_dsa_group(p, q, g)
    if not 0 < r < q or not 0 < s < q:
        raise InvalidKeyMaterialException("Signature component out of range.")

    w = cryptobreak.math.modinv(s, q)
    h = DSA_hash_to_int(hash_function(message))
    u1 = (h * w) % q
    u2 = (r * w) % q
    v = (cryptobreak.math.mod_pow(g, u1, p) * cryptobreak.math.mod_pow(y, u2, p)) % p % q
    return v == r


def dsa_x_from_k(
        k: int,
        h: int,
        signature: DSA_Signature,
        q: int
) -> int:
    """
    Given the nonce of a signature, recover the private key.

    :param k: The nonce.
    :param h: The message hash (as int).
    :param signature: The signature.
    :param q: The subgroup order.
    :return: The private key x.
    """
    r, s = signature
    return (((s * k) - h) * cryptobreak.math.modinv(r, q)) % q


def _srp_int(*args: int) -> int:
    """
    SHA256 of the concatenated little endian encodings, as an integer.
    """
    return int.from_bytes(
        cryptobreak.hash.SHA256(
            b"".join(cryptobreak.util.bytes_for_int(a) for a in args)
        ),
        byteorder='little'
    )


def _srp_x(salt: bytes, password: bytes) -> int:
    return int.from_bytes(
        cryptobreak.hash.SHA256(salt + password),
        byteorder='little'
    )


def _srp_key(s: int) -> bytes:
    return cryptobreak.hash.SHA256(cryptobreak.util.bytes_for_int(s))


def _srp_proof(key: bytes, salt: bytes) -> bytes:
    return cryptobreak.mac.hmac_sha256(key, salt)


class SRPServer:

    """
    Holds the verifier v = g ^ x mod N of a password
    (x derived from a random salt and the password).

    A login takes two rounds:
    srp_protocol_one trades the client's A for (salt, B),
    srp_protocol_two checks the client's proof HMAC-SHA256(K, salt).

    :param password: The password of the only user.
    :param n: A NIST prime.
    :param g: A primitive root of n.
    :param k: The SRP multiplier.
    """

    def __init__(
            self,
            password: bytes,
            n: int=dh_nist_p,
            g: int=2,
            k: int=3
    ):
        self.N, self.g, self.k = n, g, k

        self._salt = cryptobreak.util.bytes_for_int(random.getrandbits(64))
        self._v = cryptobreak.math.mod_pow(g, _srp_x(self._salt, password), n)
        self._K = None

    def srp_protocol_one(self, A: int) -> tuple:
        """
        :param A: The client's public key.
        :return: The salt and the server's public key B.
        """
        N = self.N
        b = random.randint(1, N - 1)
        B = (self.k * self._v + cryptobreak.math.mod_pow(self.g, b, N)) % N

        u = _srp_int(A, B)
        self._K = _srp_key(
            cryptobreak.math.mod_pow(A * cryptobreak.math.mod_pow(self._v, u, N), b, N)
        )
        return self._salt, B

    def srp_protocol_two(self, signature: bytes) -> bool:
        """
        :param signature: The client's proof.
        :return: True if the client is logged in.
        """
        if self._K is None:
            return False
        return hmac.compare_digest(signature, _srp_proof(self._K, self._salt))


class SRPClient:

    """
    Log into server with password.
    The negotiated key is stored in key.

    :param password: The password.
    :param server: The server.
    :param n: A NIST prime.
    :param g: A primitive root of n.
    :param k: The SRP multiplier.
    """

    def __init__(
            self,
            password: bytes,
            server: SRPServer,
            n: int=dh_nist_p,
            g: int=2,
            k: int=3,
    ):
        self.server = server
        self.N, self.g, self.k = n, g, k

        self._password = password
        self.key = None

    def _login(self, A: int, session_secret) -> bool:
        salt, B = self.server.srp_protocol_one(A)
        self.key = _srp_key(session_secret(salt, B))
        return self.server.srp_protocol_two(_srp_proof(self.key, salt))

    def srp_protocol(self) -> bool:
        """
        :return: True if the server accepted the login.
        """
        N = self.N
        a = random.randint(1, N - 1)
        A = cryptobreak.math.mod_pow(self.g, a, N)

        def session_secret(salt: bytes, B: int) -> int:
            x = _srp_x(salt, self._password)
            return cryptobreak.math.mod_pow(
                B - self.k * cryptobreak.math.mod_pow(self.g, x, N),
                a + _srp_int(A, B) * x,
                N
            )

        return self._login(A, session_secret)


class SRPClientFakeA(SRPClient):

    """
    A client without the password, sending A = 0 mod N:
    the server's session secret is then 0 whatever the password.

    :param server: The server.
    :param n: A NIST prime.
    :param g: A primitive root of n.
    :param k: The SRP multiplier.
    :param A: A multiple of n, None to run the honest protocol.
    """

    def __init__(
            self,
            server: SRPServer,
            n: int=dh_nist_p,
            g: int=2,
            k: int=3,
            A: int=None
    ):
        super().__init__(bytes(), server, n, g, k)

        if A is not None and A % n != 0:
            raise InvalidKeyMaterialException("A must be a multiple of N.")
        self.A = A

    def srp_protocol(self) -> bool:
        if self.A is None:
            return super().srp_protocol()
        return self._login(self.A, lambda salt, B: 0)
