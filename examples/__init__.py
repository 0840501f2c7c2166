# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Example scripts for the Aptos wallet client.

Each example runs against devnet by default; see ``common.py`` for the
environment variables that point them at another network.

    - **transfer_coin.py**: seed phrase accounts, airdrops, balances, transfers
      and transaction history
    - **token_ownership.py**: a Token V1 collection, an offer/claim transfer and
      the token holdings of both parties reconstructed from their events

Run with::

    python -m examples.transfer_coin
"""
