# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Mnemonic based accounts.

Aptos wallets derive Ed25519 keys from a BIP-39 seed phrase along the BIP-44
path ``m/44'/637'/{index}'/0'/0'`` (637 is the Aptos coin type). Ed25519 only
supports hardened derivation, so every segment of the path is hardened and
keys are derived with SLIP-0010.

Examples:
    Create and restore a wallet::

        from aptos_wallet.mnemonic_account import (
            account_from_mnemonic,
            generate_mnemonic,
        )

        phrase = generate_mnemonic()
        account = account_from_mnemonic(phrase)
        # Later, from the same phrase
        assert account_from_mnemonic(phrase).address() == account.address()

    A second account from the same phrase::

        savings = account_from_mnemonic(phrase, index=1)
"""

from __future__ import annotations

import hashlib
import hmac
import struct
import unittest
from typing import List, Tuple

from aptos_sdk import ed25519
from aptos_sdk.account import Account
from aptos_sdk.account_address import AccountAddress
from mnemonic import Mnemonic
from nacl.signing import SigningKey

APTOS_COIN_TYPE = 637
HARDENED_OFFSET = 0x80000000

_SLIP10_ED25519_KEY = b"ed25519 seed"
_WORDLIST = Mnemonic("english")


def generate_mnemonic(strength: int = 128) -> str:
    """Generate a new English seed phrase; 128 bits of entropy gives 12 words."""
    return _WORDLIST.generate(strength=strength)


def validate_mnemonic(mnemonic: str) -> bool:
    """Check the word list membership and checksum of a seed phrase."""
    return _WORDLIST.check(_normalize(mnemonic))


def derivation_path(index: int = 0) -> str:
    """The BIP-44 path of the account at ``index``."""
    return f"m/44'/{APTOS_COIN_TYPE}'/{index}'/0'/0'"


def parse_derivation_path(path: str) -> List[int]:
    """Parse a fully hardened derivation path into its (unhardened) indices.

    :param path: A path like ``m/44'/637'/0'/0'/0'``.
    :return: The segment indices, e.g. ``[44, 637, 0, 0, 0]``.
    :raises ValueError: If the path is malformed or has a non-hardened segment.
    """
    segments = path.split("/")
    if segments[0] != "m" or len(segments) < 2:
        raise ValueError(f"Invalid derivation path: {path}")

    indices = []
    for segment in segments[1:]:
        if not segment.endswith("'"):
            raise ValueError(f"Ed25519 only supports hardened derivation: {path}")
        digits = segment[:-1]
        if not digits.isdigit() or int(digits) >= HARDENED_OFFSET:
            raise ValueError(f"Invalid derivation path segment {segment}: {path}")
        indices.append(int(digits))
    return indices


def derive_ed25519_key(seed: bytes, path: List[int]) -> Tuple[bytes, bytes]:
    """SLIP-0010 Ed25519 derivation.

    :param seed: The BIP-39 seed (or any SLIP-0010 seed).
    :param path: Unhardened segment indices; each is hardened here.
    :return: The 32 byte private key and chain code of the final node.
    """
    digest = hmac.new(_SLIP10_ED25519_KEY, seed, hashlib.sha512).digest()
    key, chain_code = digest[:32], digest[32:]
    for index in path:
        data = b"\x00" + key + struct.pack(">L", index | HARDENED_OFFSET)
        digest = hmac.new(chain_code, data, hashlib.sha512).digest()
        key, chain_code = digest[:32], digest[32:]
    return key, chain_code


def account_from_mnemonic(mnemonic: str, index: int = 0) -> Account:
    """Derive the account at ``index`` from a seed phrase.

    :raises InvalidMnemonic: If the phrase fails BIP-39 validation.
    """
    phrase = _normalize(mnemonic)
    if not _WORDLIST.check(phrase):
        raise InvalidMnemonic()

    seed = Mnemonic.to_seed(phrase)
    key, _ = derive_ed25519_key(seed, parse_derivation_path(derivation_path(index)))
    private_key = ed25519.PrivateKey(SigningKey(key))
    return Account(AccountAddress.from_key(private_key.public_key()), private_key)


def _normalize(mnemonic: str) -> str:
    return " ".join(mnemonic.lower().split())


class InvalidMnemonic(ValueError):
    """The seed phrase is not a valid BIP-39 mnemonic"""

    def __init__(self, message: str = "Invalid Seed Phrase"):
        super().__init__(message)


class Test(unittest.TestCase):
    phrase = (
        "abandon abandon abandon abandon abandon abandon "
        "abandon abandon abandon abandon abandon about"
    )

    def test_derivation_path(self):
        self.assertEqual(derivation_path(), "m/44'/637'/0'/0'/0'")
        self.assertEqual(derivation_path(3), "m/44'/637'/3'/0'/0'")
        self.assertEqual(parse_derivation_path(derivation_path(3)), [44, 637, 3, 0, 0])

    def test_invalid_derivation_paths(self):
        for path in ["", "m", "44'/637'", "m/44'/637/0'", "m/44'/x'", "m/2147483648'"]:
            with self.subTest(path=path):
                with self.assertRaises(ValueError):
                    parse_derivation_path(path)

    def test_slip10_vector(self):
        # SLIP-0010 test vector 1 for ed25519
        seed = bytes.fromhex("000102030405060708090a0b0c0d0e0f")
        key, chain_code = derive_ed25519_key(seed, [])
        self.assertEqual(
            key.hex(),
            "2b4be7f19ee27bbf30c667b642d5f4aa69fd169872f8fc3059c08ebae2eb19e7",
        )
        self.assertEqual(
            chain_code.hex(),
            "90046a93de5380a72b5e45010748567d5ea02bbf6522f979e05c0d8d8ca9fffb",
        )
        key, _ = derive_ed25519_key(seed, [0])
        self.assertEqual(
            key.hex(),
            "68e0fe46dfb67e368c75379acec591dad19df3cde26e63b93a8e704f1dade7a3",
        )

    def test_deterministic(self):
        first = account_from_mnemonic(self.phrase)
        second = account_from_mnemonic(f"  {self.phrase.upper()} ")
        self.assertEqual(first, second)
        self.assertEqual(str(first.address()), first.auth_key())

        other = account_from_mnemonic(self.phrase, 1)
        self.assertNotEqual(first.address(), other.address())

    def test_generate(self):
        phrase = generate_mnemonic()
        self.assertEqual(len(phrase.split()), 12)
        self.assertTrue(validate_mnemonic(phrase))
        self.assertEqual(len(generate_mnemonic(256).split()), 24)

        account = account_from_mnemonic(phrase)
        message = b"test message"
        self.assertTrue(account.public_key().verify(message, account.sign(message)))

    def test_invalid(self):
        self.assertFalse(validate_mnemonic("nasty breeze culture"))
        # Valid words, broken checksum
        broken = " ".join(["abandon"] * 12)
        self.assertFalse(validate_mnemonic(broken))
        with self.assertRaises(InvalidMnemonic):
            account_from_mnemonic(broken)


if __name__ == "__main__":
    unittest.main()
