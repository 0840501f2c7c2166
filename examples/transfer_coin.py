# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Coin transfer walkthrough.

Alice gets a fresh seed phrase, is restored from it, funded from the faucet and
sends coins to Bob, once as APT and once through the generic coin transfer.
"""

import asyncio

from aptos_wallet.wallet_client import WalletClient

from .common import CONFIG

APTOS_COIN = "0x1::aptos_coin::AptosCoin"


async def main():
    async with WalletClient.from_config(CONFIG) as wallet:
        alice, mnemonic = await wallet.create_new_account()
        restored = await wallet.get_account_from_mnemonic(mnemonic)
        assert restored.address() == alice.address()
        bob, _ = await wallet.create_new_account()

        print("\n=== Addresses ===")
        print(f"Alice: {alice.address()}")
        print(f"Bob: {bob.address()}")

        await asyncio.gather(
            wallet.airdrop(alice.address()), wallet.airdrop(bob.address(), 1)
        )

        print("\n=== Initial Balances ===")
        print(f"Alice: {await wallet.balance(alice.address())}")
        print(f"Bob: {await wallet.balance(bob.address())}")

        gas = await wallet.estimate_gas_usage(alice, APTOS_COIN, bob.address(), 1_000)
        print(f"\nEstimated gas for a transfer: {gas}")

        await wallet.aptos_transfer(alice, bob.address(), 1_000)
        await wallet.transfer(alice, APTOS_COIN, bob.address(), 1_000)

        print("\n=== Final Balances ===")
        print(f"Alice: {await wallet.balance(alice.address())}")
        print(f"Bob: {await wallet.balance(bob.address())}")

        print("\n=== Alice's transactions ===")
        for txn in await wallet.account_transactions(alice.address()):
            print(f"{txn.version} {txn.hash} -> {txn.to_address} {txn.amount}")

        print("\n=== Bob's coin activity ===")
        for event in await wallet.get_all_transactions(bob.address()):
            print(f"{event['version']} {event['type']} {event['data']['amount']}")


if __name__ == "__main__":
    asyncio.run(main())
