#!/usr/bin/env python
# encoding: utf-8

"""
Command line runner of the cryptopals challenges.

Each challenge is registered under its number by the @challenge decorator,
most of them pair an oracle with its attacker and submit the result
as the single guess the oracle allows.
"""

import argparse
import base64
import binascii
import collections
import functools
import logging
import sys

import colorama

import cryptobreak.attacker
import cryptobreak.blocks
import cryptobreak.hash
import cryptobreak.mac
import cryptobreak.oracle
import cryptobreak.prng
import cryptobreak.public
import cryptobreak.stats
import cryptobreak.util

"""
The registered challenges, by number.
"""
challenges = collections.OrderedDict()


def challenge(number: int):
    """
    Register the decorated function as challenge number.
    Running it prints a coloured completed/failed line;
    an exhausted attack counts as a failure.

    :param number: The challenge number.
    :return: The decorator.
    """

    def decorator(challenge_f):
        @functools.wraps(challenge_f)
        def run():
            print("Executing challenge {}: {}.\n".format(number, challenge_f.__name__))
            try:
                result = challenge_f()
            except cryptobreak.attacker.AttackExhaustedException as e:
                print("Attack failed: {}".format(e))
                result = False

            color = colorama.Fore.GREEN if result else colorama.Fore.RED
            print("\n{}Challenge {}.{}".format(
                color, "completed" if result else "failed", colorama.Fore.RESET
            ))
            return result

        assert number not in challenges, "Challenge {} registered twice.".format(number)
        challenges[number] = run
        return run

    return decorator


def _show(label: str, value):
    if isinstance(value, bytes):
        value = value.decode("ascii", errors="replace")
    print("{}: {}".format(label, value))


def _break(oracle_class, attacker_class, *args, label: str="Discovered", **kwargs) -> bool:
    """
    Attack a fresh oracle and submit the result.

    :param oracle_class: The oracle to be built with args and kwargs.
    :param attacker_class: Its attacker.
    :param label: How to print the attack result.
    :return: The oracle verdict.
    """
    oracle = oracle_class(*args, **kwargs)
    result = attacker_class(oracle).attack()
    if result is not None:
        _show(label, result)
    return oracle.guess(result)


@challenge(1)
def hex_to_base64():
    """http://cryptopals.com/sets/1/challenges/1/"""
    raw = bytes.fromhex(
        "49276d206b696c6c696e6720796f757220627261696e206c"
        "696b65206120706f69736f6e6f7573206d757368726f6f6d"
    )
    encoded = cryptobreak.util.bytes_to_b64(raw)
    _show("Base64", encoded)
    return encoded == b"SSdtIGtpbGxpbmcgeW91ciBicmFpbiBsaWtlIGEgcG9pc29ub3VzIG11c2hyb29t"


@challenge(2)
def fixed_xor():
    """http://cryptopals.com/sets/1/challenges/2/"""
    c = cryptobreak.util.xor(
        bytes.fromhex("1c0111001f010100061a024b53535009181c"),
        bytes.fromhex("686974207468652062756c6c277320657965")
    )
    _show("XOR", c)
    return c == bytes.fromhex("746865206b696420646f6e277420706c6179")


@challenge(3)
def single_byte_xor():
    """http://cryptopals.com/sets/1/challenges/3/"""
    ciphertext = bytes.fromhex(
        "1b37373331363f78151b7f2b783431333d78397828372d363c78373e783a393b3736"
    )
    key = cryptobreak.stats.most_likely_xor_chars(ciphertext)[0]
    plaintext = cryptobreak.util.xor_char(ciphertext, key)
    _show("Key {!r}".format(key), plaintext)
    return plaintext == b"Cooking MC's like a pound of bacon"


@challenge(5)
def repeating_key_xor():
    """http://cryptopals.com/sets/1/challenges/5/"""
    stanza = b"Burning 'em, if you ain't quick and nimble\n" \
             b"I go crazy when I hear a cymbal"
    ciphertext = cryptobreak.util.repeating_xor(stanza, b"ICE")
    _show("Hex", binascii.hexlify(ciphertext))
    return ciphertext == bytes.fromhex(
        "0b3637272a2b2e63622c2e69692a23693a2a3c6324202d623d63343c2a2622632427"
        "2765272a282b2f20430a652e2c652a3124333a653e2b2027630c692b202831652863"
        "26302e27282f"
    )


@challenge(6)
def break_repeating_key_xor():
    """http://cryptopals.com/sets/1/challenges/6/"""
    key = b"Terminator X: Bring the noise"
    plaintext = b" ".join(cryptobreak.oracle.OracleFixedNonceCTR.default_strings)
    ciphertext = cryptobreak.util.repeating_xor(plaintext, key)

    discovered = cryptobreak.stats.break_repeating_xor(ciphertext)
    _show("Key", discovered)
    return discovered == key


@challenge(7)
def aes_ecb_mode():
    """http://cryptopals.com/sets/1/challenges/7/"""
    key = b"YELLOW SUBMARINE"
    plaintext = cryptobreak.oracle.OracleByteAtATimeEcb.default_unknown_string
    ciphertext = cryptobreak.blocks.aes_ecb_encrypt(key, plaintext)

    decrypted = cryptobreak.blocks.aes_ecb_decrypt(key, ciphertext)
    _show("Decrypted", decrypted)
    return decrypted == plaintext


@challenge(8)
def detect_aes_ecb():
    """http://cryptopals.com/sets/1/challenges/8/"""
    key = cryptobreak.util.random_aes_key()
    zeros = bytes(64)
    candidates = (
        cryptobreak.blocks.aes_cbc_encrypt(key, cryptobreak.util.random_bytes_range(16), zeros),
        cryptobreak.blocks.aes_ecb_encrypt(key, zeros),
        cryptobreak.util.random_bytes_range(80),
    )

    ecb = [i for i, c in enumerate(candidates) if cryptobreak.blocks.any_equal_block(c)]
    _show("ECB candidates", ecb)
    return ecb == [1]


@challenge(9)
def pkcs7_padding():
    """http://cryptopals.com/sets/2/challenges/9/"""
    padded = cryptobreak.blocks.pkcs_7(b"YELLOW SUBMARINE", 20)
    _show("Padded", repr(padded))
    return padded == b"YELLOW SUBMARINE\x04\x04\x04\x04"


@challenge(10)
def cbc_mode():
    """http://cryptopals.com/sets/2/challenges/10/"""
    key = b"YELLOW SUBMARINE"
    iv = bytes(cryptobreak.blocks.BLOCK_SIZE)
    plaintext = cryptobreak.oracle.OracleByteAtATimeEcb.default_unknown_string

    ciphertext = cryptobreak.blocks.aes_cbc_encrypt(key, iv, plaintext)
    decrypted = cryptobreak.blocks.aes_cbc_decrypt(key, iv, ciphertext)
    _show("Decrypted", decrypted)
    return decrypted == plaintext


@challenge(11)
def ecb_cbc_detection():
    """http://cryptopals.com/sets/2/challenges/11/"""
    return _break(
        cryptobreak.oracle.OracleAesEcbCbc,
        cryptobreak.attacker.AttackerAesEcbCbc,
        label="Oracle is using ECB"
    )


@challenge(12)
def byte_at_a_time_ecb():
    """http://cryptopals.com/sets/2/challenges/12/"""
    return _break(
        cryptobreak.oracle.OracleByteAtATimeEcb,
        cryptobreak.attacker.AttackerByteAtATimeEcb,
        label="Hidden string"
    )


@challenge(13)
def ecb_cut_and_paste():
    """http://cryptopals.com/sets/2/challenges/13/"""
    return _break(
        cryptobreak.oracle.OracleProfileForUser,
        cryptobreak.attacker.AttackerProfileForUser,
        label="Forged profile"
    )


@challenge(14)
def harder_byte_at_a_time_ecb():
    """http://cryptopals.com/sets/2/challenges/14/"""
    return _break(
        cryptobreak.oracle.OracleHarderByteAtATimeEcb,
        cryptobreak.attacker.AttackerHarderByteAtATimeEcb,
        label="Hidden string"
    )


@challenge(15)
def pkcs7_validation():
    """http://cryptopals.com/sets/2/challenges/15/"""
    verdicts = []
    for padded in (
            b"ICE ICE BABY\x04\x04\x04\x04",
            b"ICE ICE BABY\x05\x05\x05\x05",
            b"ICE ICE BABY\x01\x02\x03\x04",
    ):
        try:
            cryptobreak.blocks.un_pkcs_7(padded, 16)
        except cryptobreak.blocks.InvalidPaddingException:
            verdicts.append(False)
        else:
            verdicts.append(True)
        _show(repr(padded), "valid" if verdicts[-1] else "invalid")

    return verdicts == [True, False, False]


@challenge(16)
def cbc_bitflipping():
    """http://cryptopals.com/sets/2/challenges/16/"""
    return _break(
        cryptobreak.oracle.OracleBitflipping,
        cryptobreak.attacker.AttackerBitFlippingCBC,
        "cbc",
        label="Tampered ciphertext"
    )


@challenge(17)
def cbc_padding_oracle():
    """http://cryptopals.com/sets/3/challenges/17/"""
    return _break(
        cryptobreak.oracle.OracleCBCPadding,
        cryptobreak.attacker.AttackerCBCPadding,
        label="Hidden string"
    )


@challenge(18)
def ctr_mode():
    """http://cryptopals.com/sets/3/challenges/18/"""
    ciphertext = base64.b64decode(
        "L77na/nrFsKvynd6HzOoG7GHTLXsTVu9qvY/2syLXzhPweyyMTJULu/6/kXX0KSvoOLSFQ=="
    )
    plaintext = cryptobreak.blocks.aes_ctr(b"YELLOW SUBMARINE", ciphertext)
    _show("Decrypted", plaintext)
    return plaintext.startswith(b"Yo, VIP Let's kick it")


@challenge(19)
def fixed_nonce_ctr():
    """http://cryptopals.com/sets/3/challenges/19/"""
    oracle = cryptobreak.oracle.OracleFixedNonceCTR()
    discovered = cryptobreak.attacker.AttackerFixedNonceCTR(oracle).attack()
    _show("Discovered", b"\n".join(discovered))
    return oracle.guess(discovered)


@challenge(21)
def mt19937():
    """http://cryptopals.com/sets/3/challenges/21/"""
    mt_prng = cryptobreak.prng.MT19937(5489)
    numbers = [next(mt_prng) for _ in range(5)]
    _show("First outputs", numbers)
    return numbers == [3499211612, 581869302, 3890346734, 3586334585, 545404204]


@challenge(22)
def mt19937_seed_crack():
    """http://cryptopals.com/sets/3/challenges/22/"""
    return _break(
        cryptobreak.oracle.OracleMT19937Seed,
        cryptobreak.attacker.AttackerMT19937Seed,
        label="Seed"
    )


@challenge(23)
def mt19937_clone():
    """http://cryptopals.com/sets/3/challenges/23/"""
    oracle = cryptobreak.oracle.OracleMT19937Clone()
    clone = cryptobreak.attacker.AttackerMT19937Clone(oracle).attack()

    predicted = [next(clone) for _ in range(10)]
    _show("Predicted outputs", predicted)
    return oracle.guess(predicted)


@challenge(24)
def mt19937_stream_cipher():
    """http://cryptopals.com/sets/3/challenges/24/"""
    print("Brute-forcing the 16 bits seed, please wait...")
    return _break(
        cryptobreak.oracle.OracleMT19937Stream,
        cryptobreak.attacker.AttackerMT19937Stream,
        label="Seed"
    )


@challenge(25)
def random_access_ctr():
    """http://cryptopals.com/sets/4/challenges/25/"""
    return _break(
        cryptobreak.oracle.OracleRandomAccessCTR,
        cryptobreak.attacker.AttackerRandomAccessCTR,
        b"\n".join(cryptobreak.oracle.OracleFixedNonceCTR.default_strings),
        label="Plaintext"
    )


@challenge(26)
def ctr_bitflipping():
    """http://cryptopals.com/sets/4/challenges/26/"""
    return _break(
        cryptobreak.oracle.OracleBitflipping,
        cryptobreak.attacker.AttackerBitFlippingCTR,
        "ctr",
        label="Tampered ciphertext"
    )


@challenge(27)
def cbc_key_as_iv():
    """http://cryptopals.com/sets/4/challenges/27/"""
    return _break(
        cryptobreak.oracle.OracleCBCKeyIV,
        cryptobreak.attacker.AttackerCBCKeyIV,
        label="Key"
    )


@challenge(28)
def sha1_keyed_mac():
    """http://cryptopals.com/sets/4/challenges/28/"""
    key, message = b"SECRET", b"MESSAGE"
    tag = cryptobreak.mac.sha1_secret_prefix(key, message)
    _show("SHA1(key || message)", binascii.hexlify(tag))

    return cryptobreak.mac.verify_sha1_secret_prefix(key, message, tag) and \
        not cryptobreak.mac.verify_sha1_secret_prefix(key, message + b"!", tag)


def _length_extension(oracle) -> bool:
    attacker = cryptobreak.attacker.AttackerSHA1KeyedMac(oracle) \
        if isinstance(oracle, cryptobreak.oracle.OracleSHA1KeyedMac) \
        else cryptobreak.attacker.AttackerMD4KeyedMac(oracle)

    message, tag = attacker.attack()
    _show("Forged message", message)
    _show("Forged MAC", binascii.hexlify(tag))
    return oracle.guess(message, tag)


@challenge(29)
def sha1_length_extension():
    """http://cryptopals.com/sets/4/challenges/29/"""
    return _length_extension(cryptobreak.oracle.OracleSHA1KeyedMac())


@challenge(30)
def md4_length_extension():
    """http://cryptopals.com/sets/4/challenges/30/"""
    return _length_extension(cryptobreak.oracle.OracleMD4KeyedMac())


@challenge(33)
def diffie_hellman():
    """http://cryptopals.com/sets/5/challenges/33/"""
    p, _, a, pub_a = cryptobreak.public.dh_keys()
    _, _, b, pub_b = cryptobreak.public.dh_keys()
    _show("Alice", pub_a)
    _show("Bob", pub_b)

    return cryptobreak.public.dh_shared_secret(pub_a, b, p) == \
        cryptobreak.public.dh_shared_secret(pub_b, a, p)


@challenge(34)
def dh_parameter_injection():
    """http://cryptopals.com/sets/5/challenges/34/"""
    eve = cryptobreak.attacker.AttackerDHParameterInjection(
        cryptobreak.public.DHEntity(), cryptobreak.public.DHEntity()
    )
    message = eve.attack()
    _show("Eavesdropped", message)
    return message == eve.message


@challenge(35)
def dh_malicious_g():
    """http://cryptopals.com/sets/5/challenges/35/"""
    verdicts = []
    for g in ("1", "p-1", "p"):
        eve = cryptobreak.attacker.AttackerDHMaliciousG(
            cryptobreak.public.DHAckEntity(), cryptobreak.public.DHAckEntity(), g
        )
        message = eve.attack()
        _show("Eavesdropped with g = {}".format(g), message)
        verdicts.append(message == eve.message)

    return all(verdicts)


@challenge(36)
def srp():
    """http://cryptopals.com/sets/5/challenges/36/"""
    password = b"A secret password"
    client = cryptobreak.public.SRPClient(password, cryptobreak.public.SRPServer(password))

    if not client.srp_protocol():
        print("The server rejected the client.")
        return False

    _show("Negotiated key", binascii.hexlify(client.key))
    return True


@challenge(37)
def srp_zero_key():
    """http://cryptopals.com/sets/5/challenges/37/"""
    server = cryptobreak.public.SRPServer(b"A secret password")
    key = cryptobreak.attacker.AttackerSRPZeroKey(server).attack()
    _show("Key negotiated without the password", binascii.hexlify(key))
    return True


@challenge(39)
def rsa():
    """http://cryptopals.com/sets/5/challenges/39/"""
    pub, priv = cryptobreak.public.rsa_keys()
    _show("n", pub.n)

    message = b"42"
    return cryptobreak.public.rsa_decrypt(
        priv, cryptobreak.public.rsa_encrypt(pub, message)
    ) == message


@challenge(40)
def rsa_broadcast():
    """http://cryptopals.com/sets/5/challenges/40/"""
    return _break(
        cryptobreak.oracle.OracleRSABroadcast,
        cryptobreak.attacker.AttackerRSABroadcast,
        label="Message"
    )


@challenge(41)
def unpadded_rsa_recovery():
    """http://cryptopals.com/sets/6/challenges/41/"""
    return _break(
        cryptobreak.oracle.OracleUnpaddedRSARecovery,
        cryptobreak.attacker.AttackerUnpaddedRSARecovery,
        label="Message"
    )


@challenge(42)
def rsa_signature_forgery():
    """http://cryptopals.com/sets/6/challenges/42/"""
    return _break(
        cryptobreak.oracle.OracleRSAPaddedSignatureVerifier,
        cryptobreak.attacker.AttackerRSAPaddedSignatureVerifier,
        b"hi mom",
        label="Forged signature"
    )


@challenge(43)
def dsa_key_from_nonce():
    """http://cryptopals.com/sets/6/challenges/43/"""
    oracle = cryptobreak.oracle.OracleDSAKeyFromNonce()
    x = cryptobreak.attacker.AttackerDSAKeyFromNonce(oracle).attack()

    fingerprint = binascii.hexlify(
        cryptobreak.hash.SHA1("{:x}".format(x).encode("ascii"))
    ).decode("ascii")
    _show("Private key", x)
    _show("SHA1 of its hex", fingerprint)
    return oracle.guess(x) and fingerprint == "0954edd5e0afe5542a4adf012611a91912a3ec16"


@challenge(44)
def dsa_repeated_nonce():
    """http://cryptopals.com/sets/6/challenges/44/"""
    return _break(
        cryptobreak.oracle.OracleDSAKeyFromRepeatedNonce,
        cryptobreak.attacker.AttackerDSAKeyFromRepeatedNonce,
        label="Private key"
    )


@challenge(46)
def rsa_parity_oracle():
    """http://cryptopals.com/sets/6/challenges/46/"""
    return _break(
        cryptobreak.oracle.OracleRSAParity,
        cryptobreak.attacker.AttackerRSAParity,
        label="Message"
    )


@challenge(57)
def dh_small_subgroup():
    """http://cryptopals.com/sets/8/challenges/57.txt"""
    return _break(
        cryptobreak.oracle.OracleDHSmallSubgroup,
        cryptobreak.attacker.AttackerDHSmallSubgroup,
        label="Bob's private key"
    )


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cryptobreak",
        description="Run a cryptopals challenge: build its oracle and break it."
    )
    parser.add_argument(
        "number",
        type=int,
        help="the challenge number, one of {}".format(", ".join(map(str, challenges)))
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="log the attacks progress"
    )
    return parser


def main(argv: list=None) -> int:
    """
    Parse the command line and run the requested challenge.

    :param argv: The command line arguments (defaults to sys.argv).
    :return: The process exit code, 0 on success.
    """
    parser = _parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(name)s %(levelname)s: %(message)s"
        )

    if args.number not in challenges:
        parser.error("challenge {} is not implemented".format(args.number))

    colorama.init()
    return 0 if challenges[args.number]() else 1


if __name__ == '__main__':
    sys.exit(main())
