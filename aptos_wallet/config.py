# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Wallet configuration.

Every setting can be overridden through the environment:

    APTOS_NODE_URL: URL of the Aptos REST API node endpoint
    APTOS_FAUCET_URL: URL of the faucet used by ``WalletClient.airdrop``
    FAUCET_AUTH_TOKEN: Authentication token for faucet requests (if required)
    APTOS_API_KEY: Bearer token sent to the node (if required)

Defaults point at devnet.
"""

from __future__ import annotations

import os
import unittest
import unittest.mock
from dataclasses import dataclass, field
from typing import Optional

from aptos_sdk.async_client import ClientConfig

DEVNET_NODE_URL = "https://api.devnet.aptoslabs.com/v1"
DEVNET_FAUCET_URL = "https://faucet.devnet.aptoslabs.com"

# Wallet transactions are simple entry function calls
DEFAULT_MAX_GAS_AMOUNT = 50_000
DEFAULT_GAS_UNIT_PRICE = 100


def default_client_config() -> ClientConfig:
    return ClientConfig(
        max_gas_amount=DEFAULT_MAX_GAS_AMOUNT,
        gas_unit_price=DEFAULT_GAS_UNIT_PRICE,
    )


@dataclass
class WalletConfig:
    """Connection and gas settings for a ``WalletClient``.

    Attributes:
        node_url: Base URL of the full node REST API.
        faucet_url: Faucet base URL, None on networks without a faucet.
        faucet_auth_token: Optional bearer token for the faucet.
        client_config: Gas, expiration and wait settings for the REST client.
    """

    node_url: str = DEVNET_NODE_URL
    faucet_url: Optional[str] = DEVNET_FAUCET_URL
    faucet_auth_token: Optional[str] = None
    client_config: ClientConfig = field(default_factory=default_client_config)

    @staticmethod
    def from_env() -> WalletConfig:
        client_config = default_client_config()
        client_config.api_key = os.getenv("APTOS_API_KEY")
        return WalletConfig(
            node_url=os.getenv("APTOS_NODE_URL", DEVNET_NODE_URL),
            faucet_url=os.getenv("APTOS_FAUCET_URL", DEVNET_FAUCET_URL) or None,
            faucet_auth_token=os.getenv("FAUCET_AUTH_TOKEN"),
            client_config=client_config,
        )


class Test(unittest.TestCase):
    def test_defaults(self):
        config = WalletConfig()
        self.assertEqual(config.node_url, DEVNET_NODE_URL)
        self.assertEqual(config.client_config.max_gas_amount, 50_000)
        self.assertEqual(config.client_config.gas_unit_price, 100)
        self.assertIsNot(config.client_config, WalletConfig().client_config)

    def test_from_env(self):
        env = {
            "APTOS_NODE_URL": "http://127.0.0.1:8080/v1",
            "APTOS_FAUCET_URL": "",
            "FAUCET_AUTH_TOKEN": "token",
            "APTOS_API_KEY": "key",
        }
        with unittest.mock.patch.dict(os.environ, env):
            config = WalletConfig.from_env()
        self.assertEqual(config.node_url, "http://127.0.0.1:8080/v1")
        self.assertIsNone(config.faucet_url)
        self.assertEqual(config.faucet_auth_token, "token")
        self.assertEqual(config.client_config.api_key, "key")

    def test_from_env_defaults(self):
        with unittest.mock.patch.dict(os.environ, {}, clear=True):
            config = WalletConfig.from_env()
        self.assertEqual(config.faucet_url, DEVNET_FAUCET_URL)
        self.assertIsNone(config.client_config.api_key)


if __name__ == "__main__":
    unittest.main()
