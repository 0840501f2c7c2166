# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Token V1 walkthrough.

Alice creates a collection and a token, offers it to Bob, Bob claims it, and the
holdings of both accounts are rebuilt from their TokenStore events.
"""

import asyncio

from aptos_wallet.wallet_client import WalletClient

from .common import CONFIG

COLLECTION = "Alice's"
TOKEN = "Alice's first token"


async def print_tokens(wallet: WalletClient, name: str, address):
    result = await wallet.get_token_ids(address)
    print(f"\n=== {name}'s tokens ===")
    for entry in result.entries:
        details = await wallet.get_token_details(entry.identifier)
        print(f"{details['collection']} / {details['name']}: {entry.net_count}")


async def main():
    async with WalletClient.from_config(CONFIG) as wallet:
        alice, _ = await wallet.create_new_account()
        bob, _ = await wallet.create_new_account()
        await asyncio.gather(
            wallet.airdrop(alice.address()), wallet.airdrop(bob.address())
        )

        await wallet.create_collection(
            alice, COLLECTION, "Alice's simple collection", "https://aptos.dev"
        )
        await wallet.create_token(
            alice,
            COLLECTION,
            TOKEN,
            "Alice's simple token",
            1,
            "https://aptos.dev/img/nyan.jpeg",
            royalty_points_denominator=1_000_000,
            royalty_points_numerator=0,
        )
        await print_tokens(wallet, "Alice", alice.address())

        await wallet.offer_token(
            alice, bob.address(), alice.address(), COLLECTION, TOKEN, 1
        )
        await wallet.claim_token(
            bob, alice.address(), alice.address(), COLLECTION, TOKEN
        )

        await print_tokens(wallet, "Alice", alice.address())
        await print_tokens(wallet, "Bob", bob.address())


if __name__ == "__main__":
    asyncio.run(main())
