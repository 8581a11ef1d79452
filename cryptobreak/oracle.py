#!/usr/bin/env python
# encoding: utf-8

"""
The victims of the attacks.

Each oracle keeps its secrets (keys, seeds, plaintexts)
on private attributes and hands out only public material (challenge)
and the capabilities below; the attacker's answer is checked by guess.
"""

import abc
import base64
import collections
import logging
import random
import re
import typing

import cryptobreak.blocks
import cryptobreak.util
import cryptobreak.prng
import cryptobreak.stream
import cryptobreak.mac
import cryptobreak.math
import cryptobreak.hash
import cryptobreak.public

logger = logging.getLogger(__name__)


class CheatingException(Exception):
    """
    The attacker broke the rules of the game (e.g. guessed twice).
    """
    pass


class BadAsciiPlaintextException(Exception):
    """
    A decryption didn't turn out to be ASCII.
    The offending plaintext is attached.
    """

    def __init__(self, recovered_plaintext: bytes):
        super().__init__("Plaintext contains non ASCII characters.")
        self.recovered_plaintext = recovered_plaintext


class Oracle(abc.ABC):
    """
    Holds a secret and grants a single guess about it.
    """

    def __init__(self):
        self._guessed = False

    def challenge(self):
        """
        :return: The public material of the game, None if there's none.
        """
        return None

    @abc.abstractmethod
    def guess(self, *args) -> bool:
        """
        :return: True if the attack result is right.
        """
        pass

    def _guess_once(self):
        """
        :raise CheatingException: On the second guess.
        """
        if self._guessed:
            raise CheatingException("Attackers can only guess once!")
        self._guessed = True


class EncryptionOracle(Oracle):
    """
    Encrypt chosen plaintexts under a hidden key.
    """

    @abc.abstractmethod
    def encrypt(self, plaintext: bytes) -> bytes:
        """
        :param plaintext: The attacker's chosen plaintext.
        :return: Its encryption under the hidden key.
        """
        pass


class PaddingOracle(Oracle):
    """
    Decrypt under a hidden key and only tell whether
    the padding of the result is correct.
    """

    @abc.abstractmethod
    def check_padding(self, iv: bytes, ciphertext: bytes) -> bool:
        """
        :param iv: The IV the ciphertext is chained to.
        :param ciphertext: The bytes to be checked.
        :return: True if the decryption is correctly padded.
        """
        pass


class ForgeryOracle(Oracle):
    """
    Check message/tag (or signature) pairs under a hidden key.
    """

    @abc.abstractmethod
    def forge_check(self, message: bytes, tag) -> bool:
        """
        :param message: The signed bytes.
        :param tag: Its MAC (or signature).
        :return: True if the tag is valid for the message.
        """
        pass


class AdminCheckOracle(EncryptionOracle):
    """
    An encryption oracle that can tell, for any ciphertext,
    whether it decrypts to a user with admin rights.
    """

    @abc.abstractmethod
    def is_admin(self, ciphertext: bytes) -> bool:
        """
        :param ciphertext: A (possibly tampered) ciphertext.
        :return: True if it decrypts to an admin user.
        """
        pass

    def guess(self, guess: bytes) -> bool:
        """
        :param guess: The forged ciphertext.
        :return: True if it grants admin rights.
        """
        self._guess_once()
        return self.is_admin(guess)


class OracleAesEcbCbc(Oracle):
    """
    Flip a coin: heads encrypt with ECB, tails with CBC (random IV).
    The key is fresh, and 5 to 10 random bytes surround the input.
    The attacker guesses the coin.
    """

    def __init__(self):
        super().__init__()
        self._use_ecb = random.random() >= 0.5
        self._encrypted = False

    def challenge(self, b: bytes) -> bytes:
        """
        :param b: The attacker's chosen plaintext.
        :raise CheatingException: When asked twice.
        :return: Its encryption, in the secret mode.
        """
        if self._encrypted:
            raise CheatingException("Challenge can only be called once.")
        self._encrypted = True

        def salt() -> bytes:
            return cryptobreak.util.random_bytes_random_range(5, 10)

        key = cryptobreak.util.random_aes_key()
        b = salt() + b + salt()

        if self._use_ecb:
            return cryptobreak.blocks.aes_ecb_encrypt(key, b)

        iv = cryptobreak.util.random_bytes_range(cryptobreak.blocks.BLOCK_SIZE)
        return cryptobreak.blocks.aes_cbc_encrypt(key, iv, b)

    def guess(self, guess: bool) -> bool:
        """
        :param guess: True for ECB, False for CBC.
        """
        self._guess_once()
        return guess == self._use_ecb


class OracleByteAtATimeEcb(EncryptionOracle):
    """
    ECB encryption under a fixed key of
        attacker controlled bytes || unknown string.

    The attacker recovers the unknown string one byte at a time.

    :param unknown_string: The string to be recovered.
    """

    default_unknown_string = base64.b64decode(
        b"Um9sbGluJyBpbiBteSA1LjAKV2l0aCBteSByYWctdG9wIGRvd24gc28gbXkg"
        b"aGFpciBjYW4gYmxvdwpUaGUgZ2lybGllcyBvbiBzdGFuZGJ5IHdhdmluZyBq"
        b"dXN0IHRvIHNheSBoaQpEaWQgeW91IHN0b3A/IE5vLCBJIGp1c3QgZHJvdmUg"
        b"YnkK"
    )

    def __init__(self, unknown_string: bytes=None):
        super().__init__()
        self._consistent_key = cryptobreak.util.random_aes_key()
        self._unknown_string = unknown_string \
            if unknown_string is not None \
            else type(self).default_unknown_string

    def _plaintext(self, chosen: bytes) -> bytes:
        return chosen + self._unknown_string

    def guess(self, guess: bytes) -> bool:
        self._guess_once()
        return guess == self._unknown_string

    def encrypt(self, plaintext: bytes) -> bytes:
        return cryptobreak.blocks.aes_ecb_encrypt(
            self._consistent_key,
            self._plaintext(plaintext)
        )


class OracleHarderByteAtATimeEcb(OracleByteAtATimeEcb):
    """
    Like OracleByteAtATimeEcb, with 1 to 32 random bytes
    (fixed for the oracle lifetime) in front of the attacker's bytes.
    """

    def __init__(self, unknown_string: bytes=None):
        super().__init__(unknown_string)
        self._prefix = cryptobreak.util.random_bytes_random_range(1, 32)

    def _plaintext(self, chosen: bytes) -> bytes:
        return self._prefix + super()._plaintext(chosen)


class OracleProfileForUser(AdminCheckOracle):
    """
    Turn an email address into an ECB encrypted profile
        email=<mail>&uid=10&role=user

    The attacker cuts and pastes ciphertext blocks
    into a profile whose role is admin.
    """

    admin_role, user_role = "admin", "user"

    _mail_pattern = re.compile(r"^[^@.]+@[^@.]+\.[^@.]{2,4}$")

    def __init__(self):
        super().__init__()
        self._key = cryptobreak.util.random_aes_key()

    @classmethod
    def build_profile(cls, mail: str) -> str:
        """
        Encode the profile of mail, "&" and "=" are stripped.
        Every profile gets uid 10 and the user role.

        :param mail: Something shaped like local@domain.tld.
        :return: The key=value encoded profile.
        """
        assert mail and cls._mail_pattern.match(mail), \
            "Specified mail is invalid."

        return cryptobreak.util.dictionary_to_kv(collections.OrderedDict((
            ("email", re.sub(r"[&=]", "", mail)),
            ("uid", 10),
            ("role", cls.user_role),
        )))

    def encrypt(self, plaintext: bytes) -> bytes:
        """
        :param plaintext: The ASCII email address.
        :return: The encrypted profile.
        """
        profile = self.build_profile(plaintext.decode("ascii"))
        return cryptobreak.blocks.aes_ecb_encrypt(self._key, profile.encode("ascii"))

    def is_admin(self, ciphertext: bytes) -> bool:
        try:
            encoded_profile = cryptobreak.blocks.aes_ecb_decrypt(
                self._key,
                ciphertext
            ).decode("ascii")
        except (cryptobreak.blocks.InvalidPaddingException,
                cryptobreak.util.LengthMismatchException,
                UnicodeDecodeError):
            return False

        profile = cryptobreak.util.key_value_parsing(encoded_profile)
        return profile.get("role") == self.admin_role


class OracleBitflipping(AdminCheckOracle):
    """
    Encrypt
        prefix || escape(user data) || suffix
    where escape quotes ";" and "=", in CBC or CTR mode.

    The attacker tampers with the ciphertext until
    its decryption contains target.

    :param mode: Either "cbc" or "ctr".
    """

    prefix = b"comment1=cooking%20MCs;userdata="
    suffix = b";comment2=%20like%20a%20pound%20of%20bacon"
    target = b";admin=true;"

    _meta = ";="

    def __init__(self, mode: str="cbc"):
        super().__init__()
        assert mode in ("cbc", "ctr")
        self.mode = mode

        self._consistent_key = cryptobreak.util.random_aes_key()
        self._iv = cryptobreak.util.random_bytes_range(cryptobreak.blocks.BLOCK_SIZE)
        self._nonce = random.randint(0, 2 ** 64 - 1)

    def _cipher(self, b: bytes, decrypt: bool=False) -> bytes:
        if self.mode == "ctr":
            return cryptobreak.blocks.aes_ctr(self._consistent_key, b, self._nonce)
        if decrypt:
            return cryptobreak.blocks.aes_cbc_decrypt(self._consistent_key, self._iv, b)
        return cryptobreak.blocks.aes_cbc_encrypt(self._consistent_key, self._iv, b)

    def encrypt(self, plaintext: bytes) -> bytes:
        """
        :param plaintext: The ASCII user data.
        :return: The encryption of the escaped and wrapped user data.
        """
        escaped = cryptobreak.util.escape_metas(plaintext.decode("ascii"), self._meta)
        return self._cipher(self.prefix + escaped.encode("ascii") + self.suffix)

    def is_admin(self, ciphertext: bytes) -> bool:
        try:
            payload = self._cipher(ciphertext, decrypt=True)
        except (cryptobreak.blocks.InvalidPaddingException,
                cryptobreak.util.LengthMismatchException):
            return False
        return self.target in payload


class OracleCBCPadding(PaddingOracle):
    """
    CBC encrypt one of strings, picked at random,
    and answer padding queries about any ciphertext.

    The attacker decrypts the hidden string from the padding answers alone.

    :param strings: The candidate hidden strings.
    """

    default_strings = tuple(base64.b64decode(s) for s in (
        "MDAwMDAwTm93IHRoYXQgdGhlIHBhcnR5IGlzIGp1bXBpbmc=",
        "MDAwMDAxV2l0aCB0aGUgYmFzcyBraWNrZWQgaW4gYW5kIHRoZSBWZWdhJ3MgYXJlIHB1bXBpbic=",
        "MDAwMDAyUXVpY2sgdG8gdGhlIHBvaW50LCB0byB0aGUgcG9pbnQsIG5vIGZha2luZw==",
        "MDAwMDAzQ29va2luZyBNQydzIGxpa2UgYSBwb3VuZCBvZiBiYWNvbg==",
        "MDAwMDA0QnVybmluZyAnZW0sIGlmIHlvdSBhaW4ndCBxdWljayBhbmQgbmltYmxl",
        "MDAwMDA1SSBnbyBjcmF6eSB3aGVuIEkgaGVhciBhIGN5bWJhbA==",
        "MDAwMDA2QW5kIGEgaGlnaCBoYXQgd2l0aCBhIHNvdXBlZCB1cCB0ZW1wbw==",
        "MDAwMDA3SSdtIG9uIGEgcm9sbCwgaXQncyB0aW1lIHRvIGdvIHNvbG8=",
        "MDAwMDA4b2xsaW4nIGluIG15IGZpdmUgcG9pbnQgb2g=",
        "MDAwMDA5aXRoIG15IHJhZy10b3AgZG93biBzbyBteSBoYWlyIGNhbiBibG93",
    ))

    def __init__(self, strings: typing.Sequence[bytes]=None):
        super().__init__()
        self._consistent_key = cryptobreak.util.random_aes_key()
        self._hidden_string = random.choice(
            strings if strings else type(self).default_strings
        )

    def guess(self, guess: bytes) -> bool:
        self._guess_once()
        return guess == self._hidden_string

    def challenge(self) -> tuple:
        """
        :return: A fresh (ciphertext, IV) pair for the hidden string.
        """
        iv = cryptobreak.util.random_bytes_range(cryptobreak.blocks.BLOCK_SIZE)
        return cryptobreak.blocks.aes_cbc_encrypt(
            self._consistent_key, iv, self._hidden_string
        ), iv

    def check_padding(self, iv: bytes, ciphertext: bytes) -> bool:
        """
        :raise LengthMismatchException: On a malformed IV or ciphertext.
        """
        try:
            cryptobreak.blocks.aes_cbc_decrypt(self._consistent_key, iv, ciphertext)
        except cryptobreak.blocks.InvalidPaddingException:
            return False
        return True


class OracleFixedNonceCTR(Oracle):
    """
    CTR encrypt every string under the same key and nonce 0,
    so that they all share one keystream.

    The attacker recovers the strings.

    :param strings: The strings to be encrypted.
    """

    default_strings = tuple(base64.b64decode(s) for s in (
        "SSBoYXZlIG1ldCB0aGVtIGF0IGNsb3NlIG9mIGRheQ==",
        "Q29taW5nIHdpdGggdml2aWQgZmFjZXM=",
        "RnJvbSBjb3VudGVyIG9yIGRlc2sgYW1vbmcgZ3JleQ==",
        "RWlnaHRlZW50aC1jZW50dXJ5IGhvdXNlcy4=",
        "SSBoYXZlIHBhc3NlZCB3aXRoIGEgbm9kIG9mIHRoZSBoZWFk",
        "T3IgcG9saXRlIG1lYW5pbmdsZXNzIHdvcmRzLA==",
        "T3IgaGF2ZSBsaW5nZXJlZCBhd2hpbGUgYW5kIHNhaWQ=",
        "UG9saXRlIG1lYW5pbmdsZXNzIHdvcmRzLA==",
        "QW5kIHRob3VnaHQgYmVmb3JlIEkgaGFkIGRvbmU=",
        "T2YgYSBtb2NraW5nIHRhbGUgb3IgYSBnaWJl",
        "VG8gcGxlYXNlIGEgY29tcGFuaW9u",
        "QXJvdW5kIHRoZSBmaXJlIGF0IHRoZSBjbHViLA==",
        "QmVpbmcgY2VydGFpbiB0aGF0IHRoZXkgYW5kIEk=",
        "QnV0IGxpdmVkIHdoZXJlIG1vdGxleSBpcyB3b3JuOg==",
        "QWxsIGNoYW5nZWQsIGNoYW5nZWQgdXR0ZXJseTo=",
        "QSB0ZXJyaWJsZSBiZWF1dHkgaXMgYm9ybi4=",
        "VGhhdCB3b21hbidzIGRheXMgd2VyZSBzcGVudA==",
        "SW4gaWdub3JhbnQgZ29vZCB3aWxsLA==",
        "SGVyIG5pZ2h0cyBpbiBhcmd1bWVudA==",
        "VW50aWwgaGVyIHZvaWNlIGdyZXcgc2hyaWxsLg==",
        "V2hhdCB2b2ljZSBtb3JlIHN3ZWV0IHRoYW4gaGVycw==",
        "V2hlbiB5b3VuZyBhbmQgYmVhdXRpZnVsLA==",
        "U2hlIHJvZGUgdG8gaGFycmllcnM/",
        "VGhpcyBtYW4gaGFkIGtlcHQgYSBzY2hvb2w=",
        "QW5kIHJvZGUgb3VyIHdpbmdlZCBob3JzZS4=",
        "VGhpcyBvdGhlciBoaXMgaGVscGVyIGFuZCBmcmllbmQ=",
        "V2FzIGNvbWluZyBpbnRvIGhpcyBmb3JjZTs=",
        "SGUgbWlnaHQgaGF2ZSB3b24gZmFtZSBpbiB0aGUgZW5kLA==",
        "U28gc2Vuc2l0aXZlIGhpcyBuYXR1cmUgc2VlbWVkLA==",
        "U28gZGFyaW5nIGFuZCBzd2VldCBoaXMgdGhvdWdodC4=",
        "VGhpcyBvdGhlciBtYW4gSSBoYWQgZHJlYW1lZA==",
        "QSBkcnVua2VuLCB2YWluLWdsb3Jpb3VzIGxvdXQu",
        "SGUgaGFkIGRvbmUgbW9zdCBiaXR0ZXIgd3Jvbmc=",
        "VG8gc29tZSB3aG8gYXJlIG5lYXIgbXkgaGVhcnQs",
        "WWV0IEkgbnVtYmVyIGhpbSBpbiB0aGUgc29uZzs=",
        "SGUsIHRvbywgaGFzIHJlc2lnbmVkIGhpcyBwYXJ0",
        "SW4gdGhlIGNhc3VhbCBjb21lZHk7",
        "SGUsIHRvbywgaGFzIGJlZW4gY2hhbmdlZCBpbiBoaXMgdHVybiw=",
        "VHJhbnNmb3JtZWQgdXR0ZXJseTo=",
        "QSB0ZXJyaWJsZSBiZWF1dHkgaXMgYm9ybi4=",
    ))

    def __init__(self, strings: typing.Sequence[bytes]=None):
        super().__init__()
        self._consistent_key = cryptobreak.util.random_aes_key()
        self._buffers = tuple(strings if strings else type(self).default_strings)

    def challenge(self) -> tuple:
        """
        :return: The encrypted strings, in order.
        """
        return tuple(cryptobreak.blocks.aes_ctr(self._consistent_key, b) for b in self._buffers)

    def guess(self, guess: tuple) -> bool:
        """
        Compare, case insensitively, the first bytes of each string:
        as many as the shortest string has.
        Past those, the keystream is only covered by some of the ciphertexts.

        :param guess: The recovered strings, in order.
        """
        self._guess_once()
        if len(guess) != len(self._buffers):
            return False

        shortest = min(map(len, self._buffers))
        return all(
            recovered[:shortest].lower() == hidden[:shortest].lower()
            for recovered, hidden in zip(guess, self._buffers)
        )


class OracleRandomAccessCTR(Oracle):
    """
    CTR encrypt a plaintext under a random key and nonce,
    and let anyone overwrite part of it through edit.

    The attacker recovers the plaintext.

    :param plaintext: The hidden plaintext.
    """

    def __init__(self, plaintext: bytes):
        super().__init__()
        assert plaintext

        self._consistent_key = cryptobreak.util.random_aes_key()
        self._nonce = random.randint(0, 2 ** 64 - 1)
        self._plaintext = plaintext

    def guess(self, guess: bytes) -> bool:
        self._guess_once()
        return guess == self._plaintext

    def challenge(self) -> bytes:
        """
        :return: The encrypted plaintext.
        """
        return cryptobreak.blocks.aes_ctr_encrypt(
            self._consistent_key, self._plaintext, self._nonce
        )

    def edit(self, ciphertext: bytes, offset: int, new_text: bytes) -> bytes:
        """
        Decrypt the ciphertext, replace the plaintext starting at offset
        with new_text and return the new encryption.

        :param ciphertext: The ciphertext to be edited.
        :param offset: The offset of the first byte to be modified.
        :param new_text: The replacement bytes.
        :return: The edited ciphertext.
        """
        if offset < 0 or offset + len(new_text) > len(ciphertext):
            raise cryptobreak.util.LengthMismatchException(
                "Can't edit {} bytes at offset {}.".format(len(new_text), offset)
            )

        plaintext = bytearray(cryptobreak.blocks.aes_ctr_decrypt(
            self._consistent_key, ciphertext, self._nonce
        ))
        plaintext[offset:offset + len(new_text)] = new_text
        return cryptobreak.blocks.aes_ctr_encrypt(
            self._consistent_key, bytes(plaintext), self._nonce
        )


class OracleCBCKeyIV(Oracle):
    """
    Unpadded CBC that reuses the key as IV.
    Decryptions that aren't ASCII are reported back, plaintext included.

    The attacker recovers the key.
    """

    def __init__(self):
        super().__init__()
        self._consistent_key = cryptobreak.util.random_aes_key()

    def _cbc(self, b: bytes, decrypt: bool=False) -> bytes:
        return cryptobreak.blocks.aes_cbc(
            self._consistent_key, b, decrypt=decrypt, iv=self._consistent_key
        )[0]

    def guess(self, guess: bytes) -> bool:
        self._guess_once()
        return self._consistent_key == guess

    def decrypt(self, ciphertext: bytes) -> bytes:
        """
        :param ciphertext: Block aligned bytes.
        :return: The plaintext, when ASCII.
        :raise BadAsciiPlaintextException: Otherwise.
        """
        plaintext = self._cbc(ciphertext, decrypt=True)
        if max(plaintext, default=0) > 0x7f:
            raise BadAsciiPlaintextException(plaintext)
        return plaintext

    def challenge(self) -> bytes:
        """
        :return: The encryption of three blocks of random ASCII.
        """
        ascii_blocks = bytes(
            random.randint(0, 0x7f) for _ in range(3 * cryptobreak.blocks.BLOCK_SIZE)
        )
        return self._cbc(ascii_blocks)


class OracleMT19937Seed(Oracle):
    """
    Seed an MT19937 with a timestamp, on a simulated clock:
    wait, seed with the current time, wait again
    and hand out the first output along with the new time.

    The attacker recovers the seed.

    :param now: The simulated Unix timestamp when the oracle starts.
    :param wait_min: The minimum number of seconds to wait.
    :param wait_max: The maximum number of seconds to wait.
    """

    def __init__(
            self,
            now: int=None,
            wait_min: int=40,
            wait_max: int=1000
    ):
        super().__init__()
        assert 0 <= wait_min <= wait_max

        self._clock = now if now is not None else random.randint(0, 2 ** 31)
        self.wait_min = wait_min
        self.wait_max = wait_max
        self._seed = None

    def _wait(self):
        self._clock += random.randint(self.wait_min, self.wait_max)

    def challenge(self) -> tuple:
        """
        :return: The first MT19937 output and the simulated time.
        """
        self._wait()
        self._seed = self._clock
        first = next(cryptobreak.prng.MT19937(self._seed))
        self._wait()
        return first, self._clock

    def guess(self, guess: int) -> bool:
        self._guess_once()
        return guess == self._seed


class OracleMT19937Clone(Oracle):
    """
    Hand out 624 consecutive outputs of a randomly seeded MT19937,
    as many as the words of its state.

    The attacker clones the generator and predicts what comes next.
    """

    def __init__(self):
        super().__init__()
        self._mt_prng = cryptobreak.prng.MT19937(random.getrandbits(32))

    def guess(self, guess: list) -> bool:
        """
        :param guess: The predicted outputs, following the challenge ones.
        :raise CheatingException: If called more than once.
        """
        assert guess
        self._guess_once()
        return all(next(self._mt_prng) == predicted for predicted in guess)

    def challenge(self) -> tuple:
        return tuple(next(self._mt_prng) for _ in range(cryptobreak.prng.MT19937.n))


class OracleMT19937Stream(Oracle):
    """
    Encrypt 1 to 10 random bytes followed by 14 known "A"s
    with the MT19937 stream cipher, under a 16 bits seed.

    The attacker recovers the seed.
    """

    known_plaintext = b"A" * 14
    seed_bits = 16

    def __init__(self):
        super().__init__()
        self._seed = random.randint(0, 2 ** type(self).seed_bits - 1)
        self._plaintext = cryptobreak.util.random_bytes_random_range(1, 10) + \
            type(self).known_plaintext

    def challenge(self) -> bytes:
        return cryptobreak.stream.mt19937_stream(self._seed, self._plaintext)

    def guess(self, guess: int) -> bool:
        self._guess_once()
        return guess == self._seed


class OracleKeyedMac(ForgeryOracle):
    """
    Tag a fixed message with a secret-prefix MAC,
    under a key whose length is secret as well.

    The attacker forges a tag for a new message containing target.

    :param mac_function: Computes the tag of (key, message).
    :param verify_function: Checks a (key, message, tag) triple.
    :param key: The secret key (random, of random length, if None).
    """

    message = (
        b"comment1=cooking%20MCs;userdata=foo;"
        b"comment2=%20like%20a%20pound%20of%20bacon"
    )
    target = b";admin=true"

    def __init__(self, mac_function, verify_function, key: bytes=None):
        super().__init__()
        self.mac_function = mac_function
        self.verify_function = verify_function
        self._secret_key = key if key is not None else \
            cryptobreak.util.random_bytes_random_range(1, 32)

    def challenge(self) -> tuple:
        """
        :return: The fixed message and its tag.
        """
        return self.message, self.mac_function(self._secret_key, self.message)

    def forge_check(self, message: bytes, tag: bytes) -> bool:
        return self.verify_function(self._secret_key, message, tag)

    def guess(self, message: bytes, guess: bytes) -> bool:
        """
        :param message: The forged message, other than the fixed one.
        :param guess: Its forged tag.
        :raise CheatingException: When message is the fixed one.
        """
        self._guess_once()

        if message == self.message:
            raise CheatingException("You have to forge a MAC for a new message!")
        return self.target in message and self.forge_check(message, guess)


class OracleSHA1KeyedMac(OracleKeyedMac):
    """
    SHA1(key || message).
    """

    def __init__(self, key: bytes=None):
        super().__init__(
            cryptobreak.mac.sha1_secret_prefix,
            cryptobreak.mac.verify_sha1_secret_prefix,
            key
        )


class OracleMD4KeyedMac(OracleKeyedMac):
    """
    MD4(key || message).
    """

    def __init__(self, key: bytes=None):
        super().__init__(
            cryptobreak.mac.md4_secret_prefix,
            cryptobreak.mac.verify_md4_secret_prefix,
            key
        )


class OracleUnpaddedRSARecovery(Oracle):

    """
    Decrypt any unpadded RSA ciphertext, once,
    except the one carrying the secret.

    The attacker recovers the secret anyway.

    :param secret: The hidden message.
    :param bits: The size of the RSA modulus.
    """

    default_secret = b"{time: 1356304276, social: '555-55-5555'}"

    def __init__(self, secret: bytes=None, bits: int=1024):
        super(OracleUnpaddedRSARecovery, self).__init__()

        self._keys = cryptobreak.public.rsa_keys(bits=bits)
        self._secret = secret if secret is not None else type(self).default_secret
        self._ciphertext = cryptobreak.public.rsa_encrypt(self._keys.pub, self._secret)
        self._decrypted = {self._ciphertext}

    def guess(self, guess: bytes) -> bool:
        self._guess_once()
        return guess == self._secret

    def challenge(self) -> tuple:
        """
        :return: The secret ciphertext and the public key.
        """
        return self._ciphertext, self._keys.pub

    def decrypt(self, ciphertext: int) -> bytes:
        """
        :param ciphertext: An integer modulo n.
        :raise CheatingException: If it was already decrypted (or is the secret one).
        """
        if ciphertext in self._decrypted:
            raise CheatingException("I won't decrypt this blob again.")

        self._decrypted.add(ciphertext)
        return cryptobreak.public.rsa_decrypt(self._keys.priv, ciphertext)


class OracleRSABroadcast(Oracle):

    """
    Encrypt the same hidden message under e = 3
    and three distinct public keys.
    The attacker's goal is to discover the message.

    :param message: The hidden message.
    :param bits: The size of each RSA modulus.
    :param count: How many encryptions to deliver.
    """

    default_message = b"Let me talk about RSA, e is 3 and no padding."

    def __init__(self, message: bytes=None, bits: int=1024, count: int=3):
        super().__init__()
        assert count >= 3

        self._message = message if message is not None else type(self).default_message
        self.bits = bits
        self.count = count

    def challenge(self) -> tuple:
        """
        :return: The ciphertexts and the public keys they were produced with.
        """
        public_keys = []
        while len(public_keys) < self.count:
            pub = cryptobreak.public.rsa_keys(e=3, bits=self.bits).pub
            if all(cryptobreak.math.extended_gcd(pub.n, other.n)[0] == 1
                   for other in public_keys):
                public_keys.append(pub)

        return tuple(
            cryptobreak.public.rsa_encrypt(pub, self._message)
            for pub in public_keys
        ), tuple(public_keys)

    def guess(self, guess: bytes) -> bool:
        """
        :param guess: The attacker's guess on the hidden message.
        :return: True if the guess is correct.
        """
        self._guess_once()
        return guess == self._message


class OracleRSAParity(Oracle):

    """
    RSA encrypt a hidden message (e = 65537)
    and leak the parity of the decryption of any ciphertext.

    The attacker recovers the message.

    :param message: The hidden message.
    :param bits: The size of the RSA modulus.
    """

    default_message = base64.b64decode(
        b"VGhhdCdzIHdoeSBJIGZvdW5kIHlvdSBkb24ndCBwbGF5IG"
        b"Fyb3VuZCB3aXRoIHRoZSBGdW5reSBDb2xkIE1lZGluYQ=="
    )

    def __init__(self, message: bytes=None, bits: int=1024):
        super().__init__()

        self._message = message if message is not None else type(self).default_message
        self._keys = cryptobreak.public.rsa_keys(e=65537, bits=bits)

    def challenge(self) -> tuple:
        """
        :return: The encrypted message and the public key.
        """
        return cryptobreak.public.rsa_encrypt(self._keys.pub, self._message), self._keys.pub

    def is_plaintext_even(self, ciphertext: int) -> bool:
        d, n = self._keys.priv
        return cryptobreak.math.mod_pow(ciphertext, d, n) & 1 == 0

    def guess(self, guess: bytes) -> bool:
        self._guess_once()
        return self._message == guess


class OracleRSAPaddedSignatureVerifier(ForgeryOracle):

    """
    Verify e = 3 RSA signatures without checking
    that the digest ends the signature block.

    The attacker forges a signature of message.

    :param message: The message whose signature has to be forged.
    :param bits: The size of the RSA modulus.
    """

    hash_function = cryptobreak.hash.SHA1
    default_message = b"hi mom"

    def __init__(self, message: bytes=None, bits: int=1024):
        super(OracleRSAPaddedSignatureVerifier, self).__init__()
        self._keys = cryptobreak.public.rsa_keys(e=3, bits=bits)
        self._message = message if message is not None else type(self).default_message

    def challenge(self) -> tuple:
        """
        :return: The message to be signed and the verifying public key.
        """
        return self._message, self._keys.pub

    def forge_check(self, message: bytes, tag: int) -> bool:
        """
        Sloppily verify the signature:
            00 01 FF ... FF 00 ASN.1 HASH
        are searched at the block start,
        whatever comes after is ignored.

        :param message: The signed message.
        :param tag: The RSA signature.
        :return: True if the signature is valid.
        """
        e, n = self._keys.pub
        if not 0 < tag < n:
            return False

        size = cryptobreak.public.rsa_byte_size(n)
        block = cryptobreak.util.bytes_for_int(
            cryptobreak.math.mod_pow(tag, e, n),
            length=size,
            byteorder="big"
        )

        if block[:2] != b"\x00\x01":
            return False

        i = 2
        while i < size and block[i] == 0xff:
            i += 1
        if i == 2 or i == size or block[i] != 0x00:
            return False

        expected = cryptobreak.public.sha1_digest_info + \
            type(self).hash_function(message)
        return block[i + 1:i + 1 + len(expected)] == expected

    def guess(self, signature: int) -> bool:
        """
        :param signature: The forged signature of message.
        """
        self._guess_once()
        return self.forge_check(self._message, signature)


class OracleDSA(Oracle):

    """
    The attacker recovers the private key behind a DSA public key.

    :param public: The DSA public key.
    """

    def __init__(self, public: cryptobreak.public.DSA_Pub):
        super(OracleDSA, self).__init__()
        self.public_key = public

    def guess(self, guess: int) -> bool:
        """
        :param guess: The recovered x.
        :return: True if g ^ x mod p is the public key.
        """
        self._guess_once()

        y, p, q, g = self.public_key
        return 0 < guess < q and cryptobreak.math.mod_pow(g, guess, p) == y

    def challenge(self):
        return self.public_key


class OracleDSAKeyFromNonce(OracleDSA):

    """
    A signed message, whose nonce k was drawn from range(2 ** 16).
    Defaults to the published public key, message and signature.

    :param public: The DSA public key.
    :param message: The signed message.
    :param signature: The signature.
    """

    hash_function = cryptobreak.hash.SHA1
    k_range = range(0, 2 ** 16)

    default_message = (
        b"""For those that envy a MC it can be hazardous to your health\n"""
        b"""So be friendly, a matter of life and death, just like a etch-a-sketch\n"""
    )

    default_public_key = cryptobreak.public.DSA_Pub(
        int(
            """84ad4719d044495496a3201c8ff484feb45b962e7302e56a392aee4"""
            """abab3e4bdebf2955b4736012f21a08084056b19bcd7fee56048e004"""
            """e44984e2f411788efdc837a0d2e5abb7b555039fd243ac01f0fb2ed"""
            """1dec568280ce678e931868d23eb095fde9d3779191b8c0299d6e07b"""
            """bb283e6633451e535c45513b2d33c99ea17""",
            base=16
        ),
        cryptobreak.public.dsa_p,
        cryptobreak.public.dsa_q,
        cryptobreak.public.dsa_g,
    )

    default_signature = cryptobreak.public.DSA_Signature(
        548099063082341131477253921760299949438196259240,
        857042759984254168557880549501802188789837994940
    )

    def __init__(
            self,
            public: cryptobreak.public.DSA_Pub=None,
            message: bytes=None,
            signature: cryptobreak.public.DSA_Signature=None
    ):
        this = type(self)
        super(OracleDSAKeyFromNonce, self).__init__(
            public if public is not None else this.default_public_key
        )
        self.message = message if message is not None else this.default_message
        self.signature = signature if signature is not None else this.default_signature

    def challenge(self) -> tuple:
        """
        :return: The public key, the message and its signature.
        """
        return self.public_key, self.message, self.signature


class OracleDSAKeyFromRepeatedNonce(OracleDSA):

    """
    Sign each message with a nonce drawn from a pool
    smaller than the messages, so some nonces repeat.

    :param messages: The messages to be signed.
    :param nonces: How many distinct nonces are used to sign them.
    """

    SignatureForMessage = collections.namedtuple(
        "SignatureForMessage",
        ["msg", "s", "r", "h"]
    )

    default_messages = (
        b"Listen for me, you better listen for me now. ",
        b"Listen for me, you better listen for me now. ",
        b"When me rockin' the microphone me rock on steady, ",
        b"Yes a Daddy me Snow me are de article dan. ",
        b"But in a in an' a out de dance em ",
        b"Aye say where you come from a, ",
        b"People em say ya come from Jamaica, ",
        b"But me born an' raised in the ghetto that I want yas to know, ",
        b"Pure black people mon is all I mon know. ",
        b"Yeah me shoes a an tear up an' now me toes is a show a ",
        b"Where me a born in are de one Toronto, so ",
    )

    def __init__(self, messages: typing.Sequence[bytes]=None, nonces: int=4):
        this = type(self)
        self._keys = cryptobreak.public.dsa_keys()
        super(OracleDSAKeyFromRepeatedNonce, self).__init__(self._keys.pub)

        messages = messages if messages else this.default_messages
        assert len(messages) > nonces > 0, "Some nonce must be repeated."

        q = self._keys.priv.q
        pool = [random.randint(1, q - 1) for _ in range(nonces)]

        self.signatures_for_messages = []
        for msg in messages:
            signature = cryptobreak.public.dsa_sign(
                self._keys.priv, msg, k=random.choice(pool)
            )
            self.signatures_for_messages.append(
                this.SignatureForMessage(
                    msg,
                    signature.s,
                    signature.r,
                    cryptobreak.public.DSA_hash_to_int(cryptobreak.hash.SHA1(msg))
                )
            )

    def challenge(self) -> list:
        """
        :return: (msg, s, r, h) for every signed message.
        """
        return list(self.signatures_for_messages)


class OracleDHSmallSubgroup(Oracle):

    """
    Bob holds a DH private key x, in a group
    whose order has many small factors.
    For any public key h received, Bob sends back
    a message authenticated with HMAC-SHA256(h ^ x mod p),
    without checking that h belongs to the right subgroup.

    The attacker's goal is to recover x.

    :param q_bits: The size of the subgroup order.
    :param factor_bound: The bound of the other factors of p - 1.
    """

    message = b"crazy flamboyant for the rap enjoyment"

    def __init__(self, q_bits: int=40, factor_bound: int=2 ** 10):
        super().__init__()

        self.p, self.g, self.q = cryptobreak.public.dh_small_subgroup_group(
            q_bits, factor_bound
        )
        self._x = random.randint(1, self.q - 1)
        self.y = cryptobreak.math.mod_pow(self.g, self._x, self.p)

    @staticmethod
    def mac_key(k: int) -> bytes:
        """
        :param k: The DH shared secret.
        :return: The HMAC key derived from it.
        """
        return cryptobreak.util.bytes_for_int(k)

    def challenge(self) -> tuple:
        """
        :return: p, g, q and Bob's public key.
        """
        return self.p, self.g, self.q, self.y

    def exchange(self, h: int) -> tuple:
        """
        Complete a DH exchange with the given public key.

        :param h: The other party public key.
        :return: A message and its HMAC under the shared secret.
        """
        if not 1 < h < self.p:
            raise cryptobreak.public.InvalidKeyMaterialException(
                "Public key out of range."
            )

        k = cryptobreak.public.dh_shared_secret(h, self._x, self.p)
        return type(self).message, cryptobreak.mac.hmac_sha256(
            OracleDHSmallSubgroup.mac_key(k),
            type(self).message
        )

    def guess(self, guess: int) -> bool:
        """
        :param guess: The guessed private key.
        :return: True if correct.
        """
        self._guess_once()
        return guess == self._x
