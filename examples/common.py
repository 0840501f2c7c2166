# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Shared configuration for the wallet examples.

Environment Variables:
    APTOS_NODE_URL: URL of the Aptos REST API node endpoint
    APTOS_FAUCET_URL: URL of the Aptos faucet service for funding accounts
    FAUCET_AUTH_TOKEN: Authentication token for faucet requests (if required)
    APTOS_API_KEY: API key for the node (if required)
"""

import logging
import os

from aptos_wallet.config import WalletConfig

CONFIG = WalletConfig.from_env()

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))
