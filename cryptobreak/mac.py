#!/usr/bin/env python
# encoding: utf-8

"""
Message authentication codes over the Merkle-Damgard hashes.

A secret-prefix MAC is H(key || message):
anybody holding its digest can resume the hash state
and extend the message (see MerkleDamgardHash.resume).
HMAC nests two hashes and doesn't suffer from it.
"""

import hmac

import cryptobreak.hash


def secret_prefix_mac(hash_function: cryptobreak.hash.MerkleDamgardHash) -> tuple:
    """
    Build the secret-prefix MAC over the given hash.

    :param hash_function: The hash function.
    :return: The tag(key, message) and the verify(key, message, tag) functions.
    """

    def tag(key: bytes, message: bytes) -> bytes:
        return hash_function(key + message)

    def verify(key: bytes, message: bytes, candidate: bytes) -> bool:
        return hmac.compare_digest(tag(key, message), candidate)

    tag.__name__ = "{}_secret_prefix".format(hash_function.name.lower())
    verify.__name__ = "verify_{}_secret_prefix".format(hash_function.name.lower())
    return tag, verify


sha1_secret_prefix, verify_sha1_secret_prefix = secret_prefix_mac(cryptobreak.hash.SHA1)
md4_secret_prefix, verify_md4_secret_prefix = secret_prefix_mac(cryptobreak.hash.MD4)


def hmac_md(
        hash_function: cryptobreak.hash.MerkleDamgardHash,
        key: bytes,
        message: bytes
) -> bytes:
    """
    HMAC (RFC 2104) over a Merkle-Damgard hash:
    H((K ^ opad) || H((K ^ ipad) || message))

    :param hash_function: The hash function, its block size sets the key size.
    :param key: The secret key, hashed when longer than a block.
    :param message: The message to be authenticated.
    :return: The HMAC tag.
    """
    if len(key) > hash_function.block_size:
        key = hash_function(key)
    key = key.ljust(hash_function.block_size, b"\x00")

    inner = hash_function(bytes(k ^ 0x36 for k in key) + message)
    return hash_function(bytes(k ^ 0x5c for k in key) + inner)


def hmac_sha256(key: bytes, message: bytes) -> bytes:
    return hmac_md(cryptobreak.hash.SHA256, key, message)
