# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Aptos wallet client library.

A wallet layer on top of the Aptos Python SDK: seed phrase accounts, coin
transfers, Token V1 NFT management and token holdings reconstructed from an
account's TokenStore event streams.

Modules:
    - **wallet_client**: ``WalletClient``, the single entry point for wallet
      operations against a full node and faucet
    - **event_reconciler**: net token ownership from deposit/withdraw events
    - **mnemonic_account**: BIP-39 seed phrases and SLIP-0010 key derivation
      along ``m/44'/637'/{index}'/0'/0'``
    - **config**: node, faucet and gas settings, overridable from the environment

Quick Start::

    import asyncio

    from aptos_wallet.config import WalletConfig
    from aptos_wallet.wallet_client import WalletClient

    async def main():
        async with WalletClient.from_config(WalletConfig.from_env()) as wallet:
            account, mnemonic = await wallet.create_new_account()
            await wallet.airdrop(account.address())
            print(await wallet.balance(account.address()))

    asyncio.run(main())
"""
