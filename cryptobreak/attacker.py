#!/usr/bin/env python
# encoding: utf-8

"""
Each attacker is bound to an oracle (or to the parties it eavesdrops),
its attack() method returns the recovered secret or forgery,
after checking it independently whenever the oracle allows it.
"""

import abc
import collections
import concurrent.futures
import fractions
import itertools
import logging
import math
import random

import cryptobreak.oracle
import cryptobreak.blocks
import cryptobreak.stats
import cryptobreak.prng
import cryptobreak.stream
import cryptobreak.util
import cryptobreak.hash
import cryptobreak.public
import cryptobreak.mac
import cryptobreak.math

logger = logging.getLogger(__name__)


class AttackExhaustedException(Exception):
    """
    Thrown when an attack runs out of candidates,
    or when its result doesn't pass verification.
    """
    pass


class Attacker(abc.ABC):
    """Breaks the secret held by an oracle."""

    def __init__(self, oracle):
        self.oracle = oracle

    @abc.abstractmethod
    def attack(self):
        """
        Run the attack to completion.

        :return: The attack result.
        :raise AttackExhaustedException: If the attack fails.
        """
        pass


class Eavesdropper(Attacker):
    """
    A man in the middle of a DH exchange.
    Bob talks to it as if it were Alice, and the other way round.
    """

    def __init__(self, alice, bob, message: bytes=b"MessageInABottle"):
        super().__init__(bob)
        self.alice = alice
        self.bob = bob
        self.message = message
        self.eavesdropped_message = self.eavesdropped_answer = None

    def eavesdrop(self, ciphertext: bytes) -> bytes:
        """
        Relay ciphertext to Bob and read both directions
        with the session key we forced.

        :param ciphertext: What Alice sent.
        :return: What Bob answered, untouched.
        """
        answer = self.bob.receive_and_send_back(ciphertext)
        key = cryptobreak.public.DHEntity.session_key_to_16_aes_bytes(
            self._session_key
        )

        try:
            self.eavesdropped_message = \
                cryptobreak.public.DHEntity.decipher_received_message(key, ciphertext)
            self.eavesdropped_answer = \
                cryptobreak.public.DHEntity.decipher_received_message(key, answer)
        except cryptobreak.blocks.InvalidPaddingException as e:
            raise AttackExhaustedException(
                "Wrong session key {}.".format(self._session_key)
            ) from e

        return answer

    def receive_and_send_back(self, ciphertext: bytes) -> bytes:
        """
        Alice's side of the channel.
        """
        return self.eavesdrop(ciphertext)

    def _relay(self) -> bytes:
        """
        Let Alice send her message through us.

        :return: The eavesdropped message.
        """
        self.alice.send_and_receive(self, self.message)

        if self.eavesdropped_message != self.eavesdropped_answer:
            raise AttackExhaustedException("Alice and Bob exchanged different messages.")

        logger.info("Eavesdropped %r.", self.eavesdropped_message)
        return self.eavesdropped_message


class AttackerAesEcbCbc(Attacker):
    """
    Guess the mode of operation used by the oracle.
    Equal plaintext blocks produce equal ciphertext blocks in ECB mode.

    :param oracle: An instance of OracleAesEcbCbc.
    """

    def __init__(self, oracle: cryptobreak.oracle.OracleAesEcbCbc):
        super().__init__(oracle)

    def attack(self) -> bool:
        """
        :return: True if the oracle is using ECB.
        """
        # Random bytes are at most 10, 48 bytes always fill two full blocks
        ciphertext = self.oracle.challenge(
            b"\x00" * cryptobreak.blocks.BLOCK_SIZE * 3
        )
        return cryptobreak.blocks.any_equal_block(ciphertext)


class AttackerProfileForUser(Attacker):
    """
    Cut and paste ECB blocks into an admin profile:
    everything up to "role=" from one encryption,
    a padded "admin" block from another.
    """

    def __init__(self, oracle: cryptobreak.oracle.OracleProfileForUser):
        super().__init__(oracle)

    def get_base_user_profile(self) -> bytes:
        """
        Pick the email length so that the encoded profile
        ends its second block right after "role=".

        :return: The two blocks preceding the role value.
        """
        bs = cryptobreak.blocks.BLOCK_SIZE
        around = len(b"email=") + len(b"&uid=10&role=")

        domain = b"@bar.com"
        email = b"f" * (2 * bs - around - len(domain)) + domain
        return self.oracle.encrypt(email)[:2 * bs]

    def get_role_block(self) -> bytes:
        """
        Make the padded admin role start the second block
        of an email, and cut that block out of the ciphertext.

        :return: The encryption of the padded role.
        """
        bs = cryptobreak.blocks.BLOCK_SIZE
        head = b"a" * (bs - len(b"email=") - 1) + b"@"
        role = cryptobreak.blocks.pkcs_7(self.oracle.admin_role.encode("ascii"), bs)
        return self.oracle.encrypt(head + role + b".com")[bs:2 * bs]

    def attack(self) -> bytes:
        """
        :return: The forged profile ciphertext.
        :raise AttackExhaustedException: If the forgery isn't an admin profile.
        """
        forged = self.get_base_user_profile() + self.get_role_block()
        if not self.oracle.is_admin(forged):
            raise AttackExhaustedException("Forged profile is not an admin.")

        logger.info("Forged an admin profile.")
        return forged


def _check_admin(oracle: cryptobreak.oracle.AdminCheckOracle, forged: bytes) -> bytes:
    """
    :return: The forged ciphertext, if the oracle sees an admin in it.
    :raise AttackExhaustedException: Otherwise.
    """
    if not oracle.is_admin(forged):
        raise AttackExhaustedException("Tampered ciphertext has no admin rights.")

    logger.info("Forged %d bytes of admin ciphertext.", len(forged))
    return forged


class AttackerBitFlippingCBC(Attacker):
    """
    Smuggle the oracle target (";admin=true;") past its quoting.

    In CBC, XORing a difference into ciphertext block N - 1
    XORs the same difference into plaintext block N,
    so we send harmless filler and flip it into the target afterwards.
    """

    filler = b"A"

    def __init__(self, oracle: cryptobreak.oracle.OracleBitflipping):
        super().__init__(oracle)

    @staticmethod
    def flip(ciphertext: bytes, index: int, delta: bytes) -> bytes:
        """
        XOR delta into the ciphertext, starting at index.

        :param ciphertext: The ciphertext to be tampered.
        :param index: The first byte to be flipped.
        :param delta: The XOR difference.
        :return: The tampered ciphertext.
        """
        assert 0 <= index and index + len(delta) <= len(ciphertext)

        return ciphertext[:index] + \
            cryptobreak.util.xor(ciphertext[index:index + len(delta)], delta) + \
            ciphertext[index + len(delta):]

    def input_block(self) -> int:
        """
        :return: The index of the block where our input starts.
        """
        bs = cryptobreak.blocks.BLOCK_SIZE
        a = cryptobreak.blocks.chunks(self.oracle.encrypt(b"A"), bs)
        b = cryptobreak.blocks.chunks(self.oracle.encrypt(b"B"), bs)
        return next(i for i, (x, y) in enumerate(zip(a, b)) if x != y)

    def attack(self) -> bytes:
        """
        Send three filler blocks (the first may share bytes with the prefix),
        then flip the second to rewrite the third.
        The flipped block decrypts to garbage,
        so the target must fit in one block.

        :return: The tampered ciphertext.
        :raise AttackExhaustedException: If the target is longer than a block,
            or if the tampered ciphertext doesn't decrypt to an admin.
        """
        bs = cryptobreak.blocks.BLOCK_SIZE
        if len(self.oracle.target) > bs:
            raise AttackExhaustedException(
                "Target of {} bytes doesn't fit a single block.".format(
                    len(self.oracle.target)
                )
            )

        k = self.input_block()

        target = self.oracle.target.ljust(bs, type(self).filler)
        ciphertext = self.oracle.encrypt(type(self).filler * bs * 3)

        delta = cryptobreak.util.xor(type(self).filler * bs, target)
        forged = AttackerBitFlippingCBC.flip(ciphertext, (k + 1) * bs, delta)
        return _check_admin(self.oracle, forged)


class AttackerBitFlippingCTR(Attacker):
    """
    Same forgery as AttackerBitFlippingCBC, against CTR.
    The keystream is XORed in place, so the difference
    goes right on top of our own filler.
    """

    filler = b"A"

    def __init__(self, oracle: cryptobreak.oracle.OracleBitflipping):
        super().__init__(oracle)

    def prefix_len(self) -> int:
        """
        :return: The length of the string prefixed to our input.
        """
        a = self.oracle.encrypt(b"A")
        b = self.oracle.encrypt(b"B")
        return next(i for i, (x, y) in enumerate(zip(a, b)) if x != y)

    def attack(self) -> bytes:
        """
        :return: The tampered ciphertext.
        :raise AttackExhaustedException: If it doesn't decrypt to an admin.
        """
        target = self.oracle.target
        trap = type(self).filler * len(target)

        ciphertext = self.oracle.encrypt(trap)
        forged = AttackerBitFlippingCBC.flip(
            ciphertext,
            self.prefix_len(),
            cryptobreak.util.xor(trap, target)
        )
        return _check_admin(self.oracle, forged)


class AttackerByteAtATimeEcb(Attacker):
    """
    Recover the string the oracle appends to our input.
    Once block size and ECB mode are confirmed, line each unknown byte
    up as the last of a block and match it against a dictionary
    of the 256 blocks ending with a known prefix.
    """

    def __init__(self, oracle: cryptobreak.oracle.OracleByteAtATimeEcb):
        super().__init__(oracle)
        self.block_size = -1
        self.prefix_len = 0
        self.unhidden_string = b""

    @staticmethod
    def get_fill_bytes_len(i: int, block_size: int, prefix_len: int=0) -> int:
        """
        How many filler bytes push byte i of the hidden string
        to the end of a block.

            prefix | filler | hidden[:i] i || ...

        :param i: Index in the hidden string.
        :param block_size: The block size.
        :param prefix_len: Length of what the oracle puts before our input.
        :return: The filler length, below block_size.
        """
        assert i >= 0
        assert prefix_len >= 0

        return (block_size - 1 - prefix_len - i) % block_size

    def discover_block_size(self) -> tuple:
        """
        Grow the input one byte at a time,
        the first jump in ciphertext length is the block size.

        :return: The block size and the number of bytes that made it change.
        """
        base_len = len(self.oracle.encrypt(b""))

        i = 1
        while True:
            t_len = len(self.oracle.encrypt(b"A" * i))
            if t_len != base_len:
                self.block_size = t_len - base_len
                logger.debug("Block size is %d.", self.block_size)
                return self.block_size, i
            i += 1

    def discover_encryption_mode(self) -> bool:
        """
        :return: True if three zero blocks leave two equal ciphertext blocks.
        """
        assert self.block_size > 0, "Block size is still unknown."

        zeros = bytes(self.block_size * 3)
        return cryptobreak.blocks.any_equal_block(
            self.oracle.encrypt(zeros), self.block_size
        )

    def discover_prefix_len(self) -> int:
        """
        :return: The length of the string prefixed by the oracle.
        """
        return 0

    def byte_discovery(self, i: int) -> bytes:
        """
        :param i: Index of the byte, all the previous ones are known.
        :return: Byte i of the hidden string.
        """
        assert self.block_size > 0, "Block size is still unknown."
        assert i == len(self.unhidden_string), "Bytes before i are still unknown."

        fill = AttackerByteAtATimeEcb.get_fill_bytes_len(
            i, self.block_size, self.prefix_len
        )
        target_block = cryptobreak.blocks.bytes_in_block(
            self.block_size,
            (self.prefix_len + fill + i) // self.block_size
        )

        # Every block ending with filler, the known bytes and a guess
        known = b"A" * fill + self.unhidden_string
        dictionary = {}
        for c in range(256):
            guess = bytes((c,))
            dictionary[self.oracle.encrypt(known + guess)[target_block]] = guess

        actual = self.oracle.encrypt(b"A" * fill)[target_block]
        try:
            return dictionary[actual]
        except KeyError:
            raise AttackExhaustedException(
                "No candidate matches byte #{}.".format(i)
            ) from None

    def verify(self, candidate: bytes) -> bool:
        """
        Encrypt the padded candidate, block aligned, in front of the hidden string:
        if they are equal, the ciphertext ends with the candidate's blocks.

        :param candidate: The candidate hidden string.
        :return: True if the candidate is the hidden string.
        """
        bs = self.block_size
        padded = cryptobreak.blocks.pkcs_7(candidate, bs)

        align = (-self.prefix_len) % bs
        start = self.prefix_len + align
        ciphertext = self.oracle.encrypt(b"A" * align + padded)

        return ciphertext[start:start + len(padded)] == ciphertext[-len(padded):]

    def attack(self) -> bytes:
        """
        :return: The hidden string.
        :raise AttackExhaustedException: If the oracle isn't ECB,
            or a byte can't be matched.
        """
        base_len = len(self.oracle.encrypt(b""))
        _, n = self.discover_block_size()

        if not self.discover_encryption_mode():
            raise AttackExhaustedException("Oracle isn't using ECB mode.")

        self.prefix_len = self.discover_prefix_len()
        # n input bytes filled the last block of prefix and hidden string
        hidden_string_len = base_len - self.prefix_len - n
        logger.debug(
            "Prefix is %d bytes, hidden string is %d bytes.",
            self.prefix_len, hidden_string_len
        )

        self.unhidden_string = b""
        for i in range(hidden_string_len):
            self.unhidden_string += self.byte_discovery(i)
            logger.debug("Discovered %r.", self.unhidden_string)

        if not self.verify(self.unhidden_string):
            raise AttackExhaustedException("Discovered string doesn't verify.")

        logger.info("Discovered hidden string: %r.", self.unhidden_string)
        return self.unhidden_string


class AttackerHarderByteAtATimeEcb(AttackerByteAtATimeEcb):
    """
    As AttackerByteAtATimeEcb, when the oracle also puts
    a fixed random prefix of unknown length before our input.
    """

    def __init__(self, oracle: cryptobreak.oracle.OracleHarderByteAtATimeEcb):
        super().__init__(oracle)

    def discover_prefix_len(self) -> int:
        """
        Pad with 2 * bs + i copies of a byte, for growing i,
        until two equal adjacent blocks appear: i is then the distance
        of the prefix end from a block boundary.
        A prefix ending (or a hidden string starting) with that byte
        skews the count, the median over three bytes does not.

        :return: The length of the prefix.
        """
        bs = self.block_size
        guesses = []

        for filler in (b"A", b"B", b"C"):
            for i in range(bs):
                blocks = cryptobreak.blocks.chunks(
                    self.oracle.encrypt(filler * (2 * bs + i)), bs
                )
                j = next(
                    (j for j in range(len(blocks) - 1) if blocks[j] == blocks[j + 1]),
                    None
                )
                if j is not None:
                    guesses.append(j * bs - i)
                    break
            else:
                raise AttackExhaustedException("Can't find the prefix length.")

        return sorted(guesses)[1]


class AttackerCBCPadding(Attacker):
    """
    Decrypt the oracle challenge with nothing but
    its answers on whether a ciphertext is well padded.

    :param oracle: The padding oracle.
    :param byte_order: The order candidate bytes are tried in.
    :param max_workers: If given, attack the blocks concurrently.
    """

    def __init__(
            self,
            oracle: cryptobreak.oracle.PaddingOracle,
            byte_order=range(256),
            max_workers: int=None
    ):
        super().__init__(oracle)
        self.byte_order = tuple(byte_order)
        self.max_workers = max_workers
        self.discovered_string = b""

    def attack_block(self, previous: bytes, block: bytes) -> bytes:
        """
        Recover the block from its last byte to its first.
        For byte i, the bytes after it are set to decrypt to the padding
        value bs - i, and byte i of a forged IV runs over every value:
        when the padding checks out, that value XOR bs - i
        is byte i of D(block), and XORing it with previous gives the plaintext.

        :param previous: The previous ciphertext block (or the IV).
        :param block: The block to be decrypted.
        :return: The plaintext block.
        """
        bs = len(block)
        intermediate = bytearray(bs)
        trap = bytearray(cryptobreak.util.random_bytes_range(bs))

        for i in reversed(range(bs)):
            padding_value = bs - i
            for k in range(i + 1, bs):
                trap[k] = intermediate[k] ^ padding_value

            for j in self.byte_order:
                trap[i] = j
                if not self.oracle.check_padding(bytes(trap), block):
                    continue

                if padding_value == 1 and i > 0:
                    # We may have produced \x02\x02 or so, alter the previous byte
                    tweaked = bytearray(trap)
                    tweaked[i - 1] ^= 0xff
                    if not self.oracle.check_padding(bytes(tweaked), block):
                        continue

                intermediate[i] = j ^ padding_value
                break
            else:
                raise AttackExhaustedException(
                    "No candidate left for byte #{}.".format(i)
                )

        return cryptobreak.util.xor(bytes(intermediate), previous)

    def attack(self) -> bytes:
        """
        Each block only depends on the previous one,
        attack them one by one (or concurrently).

        :return: The un-padded hidden string.
        """
        ciphertext, iv = self.oracle.challenge()
        bs = len(iv)

        blocks = cryptobreak.blocks.chunks(ciphertext, bs)
        previous = [iv] + blocks[:-1]

        if self.max_workers:
            with concurrent.futures.ThreadPoolExecutor(
                    max_workers=self.max_workers
            ) as executor:
                plaintext = list(executor.map(self.attack_block, previous, blocks))
        else:
            plaintext = []
            for p, b in zip(previous, blocks):
                plaintext.append(self.attack_block(p, b))
                logger.debug("Discovered block %r.", plaintext[-1])

        try:
            self.discovered_string = cryptobreak.blocks.un_pkcs_7(
                b"".join(plaintext), bs
            )
        except cryptobreak.blocks.InvalidPaddingException as e:
            raise AttackExhaustedException("Discovered string is badly padded.") from e

        logger.info("Discovered string: %r.", self.discovered_string)
        return self.discovered_string


class AttackerFixedNonceCTR(Attacker):
    """
    Read back a batch of strings encrypted under one CTR keystream.
    """

    def __init__(self, oracle: cryptobreak.oracle.OracleFixedNonceCTR):
        super().__init__(oracle)
        self.discovered_strings = tuple()

    @staticmethod
    def crib_drag(ciphertexts: tuple, crib: bytes, index: int=0) -> list:
        """
        Suppose the crib appears in ciphertexts[index],
        at each possible offset.
        The derived keystream decrypts the other ciphertexts
        at the same offset: keep the offsets where they are all printable.

        :param ciphertexts: Ciphertexts sharing the same keystream.
        :param crib: A guessed plaintext fragment.
        :param index: The ciphertext that supposedly contains the crib.
        :return: A list of (offset, decrypted fragments) tuples.
        """
        assert crib

        results = []
        target = ciphertexts[index]
        for offset in range(len(target) - len(crib) + 1):
            keystream = cryptobreak.util.xor(target[offset:offset + len(crib)], crib)

            fragments = []
            for c in ciphertexts:
                chunk = c[offset:offset + len(crib)]
                if chunk:
                    fragments.append(cryptobreak.util.xor(chunk, keystream[:len(chunk)]))
            fragments = tuple(fragments)
            if all(cryptobreak.stats.is_printable(f) for f in fragments):
                results.append((offset, fragments))

        return results

    def attack(self) -> tuple:
        """
        Byte i of every ciphertext is XORed with keystream byte i,
        so each column is a single byte XOR: its key is the best scoring
        byte that leaves the column printable.

        :return: The discovered strings.
        """
        buffers = self.oracle.challenge()
        max_len = max(len(b) for b in buffers)

        keystream = bytearray()
        for i in range(max_len):
            column = bytes(b[i] for b in buffers if len(b) > i)
            candidates = cryptobreak.stats.most_likely_xor_chars(column, 256)

            for c in candidates:
                if cryptobreak.stats.is_printable(
                        cryptobreak.util.xor_char(column, c)
                ):
                    keystream.append(ord(c))
                    break
            else:
                raise AttackExhaustedException(
                    "No printable candidate for column #{}.".format(i)
                )

        self.discovered_strings = tuple(
            cryptobreak.util.xor(b, bytes(keystream[:len(b)])) for b in buffers
        )
        if not all(cryptobreak.stats.is_printable(s) for s in self.discovered_strings):
            raise AttackExhaustedException("Discovered strings are not printable.")

        for s in self.discovered_strings:
            logger.info("Discovered %r.", s)
        return self.discovered_strings


class AttackerRandomAccessCTR(Attacker):
    """
    Abuse the random access edit of a CTR ciphertext
    to read it back.
    """

    def __init__(self, oracle: cryptobreak.oracle.OracleRandomAccessCTR):
        super().__init__(oracle)
        self.discovered_plaintext = None

    def attack(self) -> bytes:
        """
        Replace the plaintext with the ciphertext itself.
        The keystream cancels out and the oracle returns the plaintext.

        :return: The hidden plaintext.
        """
        challenge = self.oracle.challenge()
        self.discovered_plaintext = self.oracle.edit(challenge, 0, challenge)

        if self.oracle.edit(challenge, 0, self.discovered_plaintext) != challenge:
            raise AttackExhaustedException("Plaintext doesn't encrypt to the challenge.")
        return self.discovered_plaintext


class AttackerCBCKeyIV(Attacker):
    """
    Recover the key of an oracle using it as its CBC IV,
    from the plaintext leaked by its ASCII check.
    """

    def __init__(self, oracle: cryptobreak.oracle.OracleCBCKeyIV):
        super().__init__(oracle)

    def attack(self) -> bytes:
        """
        Submit C1 || 0 || C1: P1 is D(C1) ^ key and P3 is D(C1),
        so P1 ^ P3 is the key.

        :return: The key.
        """
        bs = cryptobreak.blocks.BLOCK_SIZE
        challenge = self.oracle.challenge()
        first = challenge[cryptobreak.blocks.bytes_in_block(bs, 0)]

        try:
            p = self.oracle.decrypt(first + bytes(bs) + first)
        except cryptobreak.oracle.BadAsciiPlaintextException as e:
            p = e.recovered_plaintext

        key = cryptobreak.util.xor(
            p[cryptobreak.blocks.bytes_in_block(bs, 0)],
            p[cryptobreak.blocks.bytes_in_block(bs, 2)]
        )

        plaintext, _ = cryptobreak.blocks.aes_cbc(key, challenge, decrypt=True, iv=key)
        if any(c >= 128 for c in plaintext):
            raise AttackExhaustedException("Recovered key doesn't decrypt the challenge.")
        return key


class AttackerMT19937Seed(Attacker):
    """
    Find a timestamp seed by trying each second
    of the oracle waiting window.
    """

    def __init__(self, oracle: cryptobreak.oracle.OracleMT19937Seed):
        super().__init__(oracle)
        self.discovered_seed = None

    def attack(self) -> int:
        """
        :return: The seed.
        :raise AttackExhaustedException: If no second of the window matches.
        """
        output, now = self.oracle.challenge()

        for seed in range(now - self.oracle.wait_min, now - self.oracle.wait_max - 1, -1):
            if cryptobreak.prng.MT19937(seed).extract_number() == output:
                self.discovered_seed = seed
                logger.info("Discovered seed %d.", seed)
                return seed

        raise AttackExhaustedException("Can't find the seed.")


class AttackerMT19937Clone(Attacker):
    """
    Clone the oracle generator: untempering 624 consecutive outputs
    gives back its whole internal state.
    """

    def __init__(self, oracle: cryptobreak.oracle.OracleMT19937Clone):
        super().__init__(oracle)

    @staticmethod
    def undo_right_shift_xor(y: int, shift: int) -> int:
        """
        Reverse y = x ^ x >> shift.
        Each round fixes shift more bits, starting from the MSB.

        :param y: The transformation result.
        :param shift: The shift.
        :return: The value x that produced y.
        """
        x = y
        for _ in range(32 // shift + 1):
            x = y ^ (x >> shift)
        return x

    @staticmethod
    def undo_left_shift_xor_and(y: int, shift: int, mask: int) -> int:
        """
        Reverse y = x ^ (x << shift) & mask.
        Each round fixes shift more bits, starting from the LSB.

        :param y: The transformation result.
        :param shift: The shift.
        :param mask: The mask.
        :return: The value x that produced y.
        """
        x = y
        for _ in range(32 // shift + 1):
            x = y ^ ((x << shift) & mask)
        return cryptobreak.util.int_32_lsb(x)

    @staticmethod
    def untemper(y: int) -> int:
        """
        Undo the four tempering steps, last to first.

        :param y: A generator output.
        :return: The state word x such that temper(x) == y.
        """
        x = AttackerMT19937Clone.undo_right_shift_xor(y, 18)
        x = AttackerMT19937Clone.undo_left_shift_xor_and(x, 15, 0xefc60000)
        x = AttackerMT19937Clone.undo_left_shift_xor_and(x, 7, 0x9d2c5680)
        return AttackerMT19937Clone.undo_right_shift_xor(x, 11)

    def attack(self) -> cryptobreak.prng.MT19937:
        """
        :return: A generator that will output what the oracle outputs next.
        :raise AttackExhaustedException: If the untempered state doesn't temper back.
        """
        outputs = self.oracle.challenge()
        state = [AttackerMT19937Clone.untemper(y) for y in outputs]

        if any(cryptobreak.prng.MT19937.temper(x) != y for x, y in zip(state, outputs)):
            raise AttackExhaustedException("Untempered state doesn't match outputs.")

        return cryptobreak.prng.MT19937.from_state(state)


class AttackerMT19937Stream(Attacker):
    """
    Brute-force the small seed keying an MT19937 stream cipher.
    """

    def __init__(self, oracle: cryptobreak.oracle.OracleMT19937Stream):
        super().__init__(oracle)
        self.key = None

    def attack(self) -> int:
        """
        :return: The first seed whose keystream reveals the known plaintext.
        :raise AttackExhaustedException: If no seed does.
        """
        challenge = self.oracle.challenge()
        known = self.oracle.known_plaintext

        for seed in range(1 << self.oracle.seed_bits):
            decrypted = cryptobreak.stream.mt19937_stream(seed, challenge)
            if decrypted.endswith(known):
                self.key = seed
                logger.info("Discovered seed %d.", seed)
                return seed

        raise AttackExhaustedException("No {} bits seed matches.".format(self.oracle.seed_bits))


class AttackerKeyedMac(Attacker):
    """
    Length extension of a secret-prefix MAC, H(key || message).

    The MAC is the hash state after key || message || padding:
    resuming from it hashes an extension past that padding
    without knowing the key. Only the key length must be guessed,
    the oracle tells which guess is right.

    :param hash_function: The hash function used to generate the MAC.
    :param extension: The bytes to be appended.
    :param key_lengths: The key lengths to be tried.
    """

    def __init__(
            self,
            oracle: cryptobreak.oracle.OracleKeyedMac,
            hash_function: cryptobreak.hash.MerkleDamgardHash,
            extension: bytes=b";admin=true",
            key_lengths=range(0, 65)
    ):
        super().__init__(oracle)
        self.hash_function = hash_function
        self.extension = extension
        self.key_lengths = key_lengths

        self.forged_message = None
        self.forged_mac = None

    def forge(self, message: bytes, mac: bytes, key_len: int) -> tuple:
        """
        Forge a MAC for message || glue padding || extension.

        :param message: The authenticated message.
        :param mac: Its MAC.
        :param key_len: The guessed key length.
        :return: The forged message and its MAC.
        """
        h = self.hash_function
        byte_len = key_len + len(message)
        glue = h.glue_padding(byte_len)

        state = h.state_from_digest(mac, byte_len + len(glue))
        return message + glue + self.extension, h.resume(state, self.extension)

    def attack(self) -> tuple:
        """
        :return: The forged message and its MAC.
        :raise AttackExhaustedException: If no key length is accepted.
        """
        message, mac = self.oracle.challenge()

        for key_len in self.key_lengths:
            forged_message, forged_mac = self.forge(message, mac, key_len)
            logger.debug("Trying key length %d.", key_len)

            if self.oracle.forge_check(forged_message, forged_mac):
                logger.info("Key is %d bytes long.", key_len)
                self.forged_message, self.forged_mac = forged_message, forged_mac
                return forged_message, forged_mac

        raise AttackExhaustedException("No key length produced a valid forgery.")


class AttackerSHA1KeyedMac(AttackerKeyedMac):
    """
    Length extension on SHA1(key || message).
    """

    def __init__(self, oracle: cryptobreak.oracle.OracleSHA1KeyedMac, **kwargs):
        super().__init__(oracle, cryptobreak.hash.SHA1, **kwargs)


class AttackerMD4KeyedMac(AttackerKeyedMac):
    """
    Length extension on MD4(key || message).
    """

    def __init__(self, oracle: cryptobreak.oracle.OracleMD4KeyedMac, **kwargs):
        super().__init__(oracle, cryptobreak.hash.MD4, **kwargs)


class AttackerDHParameterInjection(Eavesdropper, cryptobreak.public.DHEntity):
    """
    Swap both public keys for p on their way:
    p ^ x mod p is 0, whatever the private keys.
    """

    def __init__(
            self,
            alice: cryptobreak.public.DHEntity,
            bob: cryptobreak.public.DHEntity,
            message: bytes=b"MessageInABottle"
    ):
        Eavesdropper.__init__(self, alice, bob, message)
        cryptobreak.public.DHEntity.__init__(self)

    def dh_protocol_respond(self, p: int, g: int, pub_a: int) -> int:
        """
        Answer Alice with p, and open Bob's side with p too.

        :return: p, in place of Bob's public key.
        """
        self.bob.dh_protocol_respond(p, g, p)
        self._session_key = 0
        return p

    def attack(self) -> bytes:
        """
        :return: The eavesdropped message.
        """
        self.alice.dh_protocol(self)
        return self._relay()


class AttackerDHMaliciousG(Eavesdropper, cryptobreak.public.DHAckEntity):
    """
    Sit in a group negotiating DH exchange and hand Bob
    a degenerate generator (1, p or p - 1), which leaves
    only one or two possible session keys.

    :param alice: The party starting the protocol.
    :param bob: The responding party.
    :param g: The malicious g, 1, "p" or "p-1".
    """

    def __init__(
            self,
            alice: cryptobreak.public.DHAckEntity,
            bob: cryptobreak.public.DHAckEntity,
            g="1",
            message: bytes=b"MessageInABottle",
            p: int=cryptobreak.public.dh_nist_p
    ):
        Eavesdropper.__init__(self, alice, bob, message)
        cryptobreak.public.DHAckEntity.__init__(self)

        self.p = p
        self.malicious_g = {"1": 1, "p": p, "p-1": p - 1}[str(g)]

    def set_group_parameters(self, p: int, g: int):
        """
        Acknowledge Alice's group, pass the malicious one to Bob.

        :return: True.
        """
        self.bob.set_group_parameters(p, self.malicious_g)
        return super().set_group_parameters(p, g)

    def dh_protocol_respond(self, p: int, g: int, pub_a: int) -> int:
        """
        Relay Alice's public key and work out the session key
        from the answer.

        :return: Bob's public key.
        """
        pub_bob = self.bob.dh_protocol_respond(p, self.malicious_g, pub_a)

        if self.malicious_g == 1:
            self._session_key = 1
        elif self.malicious_g == p:
            self._session_key = 0
        elif self.malicious_g == p - 1:
            # (p - 1) ^ e is p - 1 for odd e, 1 otherwise:
            # the key is p - 1 only when both private keys are odd
            self._session_key = p - 1 \
                if pub_bob == p - 1 and pub_a == p - 1 \
                else 1
        else:
            raise AttackExhaustedException("Bad malicious g value.")

        return pub_bob

    def attack(self) -> bytes:
        """
        :return: The eavesdropped message.
        """
        self.alice.dh_protocol(self, self.p, self.malicious_g)
        return self._relay()


class AttackerDHSmallSubgroup(Attacker):
    """
    Bob never checks that the public keys he receives
    lie in the subgroup of order q.
    For each small factor r of (p - 1) / q,
    send an element h of order r: Bob's answer
    is authenticated with h ^ x = h ^ (x mod r),
    brute-force x mod r against the MAC.
    Then combine the results through the CRT.
    """

    def __init__(self, oracle: cryptobreak.oracle.OracleDHSmallSubgroup):
        super().__init__(oracle)

    @staticmethod
    def element_of_order(r: int, p: int) -> int:
        """
        :param r: A prime factor of p - 1.
        :param p: The group modulo.
        :return: An element of order r.
        """
        h = 1
        while h == 1:
            h = cryptobreak.math.mod_pow(random.randint(2, p - 1), (p - 1) // r, p)
        return h

    def residue(self, r: int, p: int) -> int:
        """
        Discover x mod r.

        :param r: A prime factor of p - 1.
        :param p: The group modulo.
        :return: x mod r.
        """
        h = AttackerDHSmallSubgroup.element_of_order(r, p)
        message, tag = self.oracle.exchange(h)

        k = 1
        for e in range(r):
            if cryptobreak.mac.hmac_sha256(
                    cryptobreak.oracle.OracleDHSmallSubgroup.mac_key(k),
                    message
            ) == tag:
                logger.debug("x = %d mod %d.", e, r)
                return e
            k = (k * h) % p

        raise AttackExhaustedException("Can't find x mod {}.".format(r))

    def attack(self) -> int:
        """
        :return: Bob's private key.
        """
        p, g, q, y = self.oracle.challenge()
        j = (p - 1) // q

        residues, moduli = [], []
        for r in cryptobreak.math.small_factors(j, bound=j + 1):
            residues.append(self.residue(r, p))
            moduli.append(r)

            if math.prod(moduli) > q:
                break
        else:
            raise AttackExhaustedException("Not enough small factors to recover x.")

        x, _ = cryptobreak.math.crt(residues, moduli)
        if cryptobreak.math.mod_pow(g, x, p) != y:
            raise AttackExhaustedException("Recovered key doesn't match y.")

        logger.info("Discovered x = %d.", x)
        return x


class AttackerSRPZeroKey(Attacker):
    """
    Log into the SRP server without knowing the password,
    by sending A = 0 mod N: the server session key is
    then always SHA256(0).

    :param oracle: The SRP server.
    """

    def __init__(self, oracle: cryptobreak.public.SRPServer):
        super().__init__(oracle)

    def attack(self) -> bytes:
        """
        :return: The session key the server agreed upon.
        """
        server = self.oracle
        for multiple in range(3):
            client = cryptobreak.public.SRPClientFakeA(
                server, server.N, server.g, server.k, A=multiple * server.N
            )
            if client.srp_protocol():
                logger.info("Logged in with A = %d * N.", multiple)
                return client.key

        raise AttackExhaustedException("Server refused every fake A.")


class AttackerRSABroadcast(Attacker):
    """
    The same message has been encrypted with e = 3
    and three different moduli.
    The CRT gives m ^ 3 mod (n_0 * n_1 * n_2),
    that is m ^ 3 since m < n_i:
    the cube root is the message.
    """

    def __init__(self, oracle: cryptobreak.oracle.OracleRSABroadcast):
        super().__init__(oracle)

    def attack(self) -> bytes:
        """
        :return: The hidden message.
        """
        ciphertexts, public_keys = self.oracle.challenge()
        e = public_keys[0].e

        cube, _ = cryptobreak.math.crt(
            list(ciphertexts), [pub.n for pub in public_keys]
        )
        m = cryptobreak.math.integer_kth_root(cube, e)

        if any(cryptobreak.math.mod_pow(m, pub.e, pub.n) != c
               for c, pub in zip(ciphertexts, public_keys)):
            raise AttackExhaustedException("Recovered message doesn't encrypt correctly.")

        return cryptobreak.util.bytes_for_int(m, byteorder="big")


class AttackerUnpaddedRSARecovery(Attacker):
    """
    Multiply the ciphertext by s ^ e:
    the oracle decrypts it to s * m,
    divide by s to recover m.
    """

    def __init__(self, oracle: cryptobreak.oracle.OracleUnpaddedRSARecovery):
        super().__init__(oracle)

    def attack(self) -> bytes:
        """
        :return: The hidden message.
        """
        c, pub = self.oracle.challenge()
        e, n = pub

        s = random.randint(2, n - 1)
        while cryptobreak.math.extended_gcd(s, n)[0] != 1:
            s = random.randint(2, n - 1)

        blinded = (cryptobreak.math.mod_pow(s, e, n) * c) % n
        p = int.from_bytes(self.oracle.decrypt(blinded), byteorder="big")
        m = (p * cryptobreak.math.modinv(s, n)) % n

        if cryptobreak.math.mod_pow(m, e, n) != c:
            raise AttackExhaustedException("Recovered message doesn't encrypt to the challenge.")
        return cryptobreak.util.bytes_for_int(m, byteorder="big")


class AttackerRSAParity(Attacker):
    """
    Multiplying the ciphertext by 2 ^ e doubles the plaintext.
    Since n is odd, the parity of 2 * m mod n
    tells whether 2 * m wrapped around the modulus,
    i.e. in which half of the interval m lies.
    """

    def __init__(self, oracle: cryptobreak.oracle.OracleRSAParity):
        super().__init__(oracle)

    def attack(self) -> bytes:
        """
        :return: The hidden message.
        """
        c, pub = self.oracle.challenge()
        e, n = pub
        multiplier = cryptobreak.math.mod_pow(2, e, n)

        lower, upper = fractions.Fraction(0), fractions.Fraction(n)
        ciphertext = c
        for _ in range(n.bit_length()):
            ciphertext = (ciphertext * multiplier) % n
            middle = (lower + upper) / 2

            if self.oracle.is_plaintext_even(ciphertext):
                upper = middle
            else:
                lower = middle
            logger.debug("%r", cryptobreak.util.bytes_for_int(math.floor(upper), byteorder="big"))

        for m in sorted({math.floor(upper), math.ceil(lower)}):
            if cryptobreak.math.mod_pow(m, e, n) == c:
                return cryptobreak.util.bytes_for_int(m, byteorder="big")

        raise AttackExhaustedException("Interval doesn't contain the message.")


class AttackerRSAPaddedSignatureVerifier(Attacker):
    """
    The verifier only checks the beginning of the signature block:
        00 01 FF 00 ASN.1 HASH GARBAGE
    Fill the garbage with FF bytes and take the cube root
    (floored): its cube only differs in the garbage bytes.
    """

    hash_function = cryptobreak.hash.SHA1

    def __init__(self, oracle: cryptobreak.oracle.OracleRSAPaddedSignatureVerifier):
        super().__init__(oracle)

    def attack(self) -> int:
        """
        :return: The forged signature.
        """
        message, pub = self.oracle.challenge()
        e, n = pub
        size = cryptobreak.public.rsa_byte_size(n)

        prefix = b"\x00\x01\xff\x00" + \
            cryptobreak.public.sha1_digest_info + \
            type(self).hash_function(message)
        if len(prefix) > size:
            raise AttackExhaustedException("Modulus is too small.")

        block = prefix + b"\xff" * (size - len(prefix))
        signature = cryptobreak.math.integer_kth_root(
            int.from_bytes(block, byteorder="big"), e
        )

        if not self.oracle.forge_check(message, signature):
            raise AttackExhaustedException("Forged signature doesn't verify.")
        return signature


class AttackerDSAKeyFromNonce(Attacker):
    """
    The nonce k has been chosen from a small range:
    brute-force it, r = (g ^ k mod p) mod q tells when we're right.
    Then x = (s * k - H(m)) / r mod q.

    :param k_range: The range the nonce has been chosen from.
    """

    def __init__(
            self,
            oracle: cryptobreak.oracle.OracleDSAKeyFromNonce,
            k_range: range=None
    ):
        super().__init__(oracle)
        self.k_range = k_range if k_range is not None else oracle.k_range

    def attack(self) -> int:
        """
        :return: The private key.
        """
        public_key, message, signature = self.oracle.challenge()
        y, p, q, g = public_key
        h = cryptobreak.public.DSA_hash_to_int(self.oracle.hash_function(message))

        gk = cryptobreak.math.mod_pow(g, self.k_range.start, p)
        step = cryptobreak.math.mod_pow(g, self.k_range.step, p)
        for k in self.k_range:
            if gk % q == signature.r:
                x = cryptobreak.public.dsa_x_from_k(k, h, signature, q)
                if cryptobreak.math.mod_pow(g, x, p) == y:
                    logger.info("Discovered k = %d.", k)
                    return x
            gk = (gk * step) % p

        raise AttackExhaustedException("Nonce is not in the given range.")


class AttackerDSAKeyFromRepeatedNonce(Attacker):
    """
    Two signatures sharing the nonce share r too.
    Then k = (h1 - h2) / (s1 - s2) mod q,
    and x follows.
    """

    def __init__(self, oracle: cryptobreak.oracle.OracleDSAKeyFromRepeatedNonce):
        super().__init__(oracle)

    def attack(self) -> int:
        """
        :return: The private key.
        """
        y, p, q, g = self.oracle.public_key

        by_r = collections.defaultdict(list)
        for signature in self.oracle.challenge():
            by_r[signature.r].append(signature)

        for r, signatures in by_r.items():
            for one, two in itertools.combinations(signatures, 2):
                if one.s == two.s:
                    continue

                k = ((one.h - two.h) * cryptobreak.math.modinv((one.s - two.s) % q, q)) % q
                x = cryptobreak.public.dsa_x_from_k(
                    k, one.h, cryptobreak.public.DSA_Signature(r, one.s), q
                )
                if cryptobreak.math.mod_pow(g, x, p) == y:
                    logger.info("Messages %r and %r share the nonce.", one.msg, two.msg)
                    return x

        raise AttackExhaustedException("No pair of signatures shares the nonce.")
