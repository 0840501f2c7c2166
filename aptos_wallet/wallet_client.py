# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
High level wallet client for the Aptos blockchain.

``WalletClient`` bundles what a wallet application needs on top of the SDK's
``RestClient`` and ``FaucetClient``:

- **Accounts**: create a new account with a seed phrase or restore one from it
- **Coins**: balances, coin info, registration, transfers and gas estimation
- **Transactions**: signing, submission, history and lookups
- **Events**: raw event streams and coin activity
- **NFTs**: Token V1 collections and tokens, offer/claim transfers and the
  tokens an account holds, reconstructed from its TokenStore events

All state changing operations wait for the transaction to be committed and
return its hash. Failures surface as exceptions: the SDK's ``ApiError``,
``AccountNotFound`` and ``ResourceNotFound`` for node errors, and the errors
defined here for invalid requests.

Examples:
    Restore a wallet and send coins::

        from aptos_wallet.wallet_client import WalletClient

        async with WalletClient(NODE_URL, FAUCET_URL) as wallet:
            alice = await wallet.get_account_from_mnemonic(phrase)
            await wallet.airdrop(alice.address())
            txn_hash = await wallet.aptos_transfer(alice, bob_address, 1_000)

    List the NFTs an account holds::

        result = await wallet.get_token_ids(alice.address())
        for entry in result.held():
            token = await wallet.get_token_details(entry.identifier)
            print(token["name"], entry.net_count)
"""

from __future__ import annotations

import asyncio
import logging
import unittest
import unittest.mock
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import httpx
from aptos_sdk.account import Account
from aptos_sdk.account_address import AccountAddress
from aptos_sdk.async_client import (
    AccountNotFound,
    ApiError,
    ClientConfig,
    FaucetClient,
    RestClient,
)
from aptos_sdk.bcs import Serializer
from aptos_sdk.transactions import (
    EntryFunction,
    SignedTransaction,
    TransactionArgument,
    TransactionPayload,
)
from aptos_sdk.type_tag import StructTag, TypeTag

from .config import WalletConfig, default_client_config
from .event_reconciler import ReconciliationResult, reconcile
from .mnemonic_account import account_from_mnemonic, generate_mnemonic

U64_MAX = 18446744073709551615

COIN_STORE = "0x1::coin::CoinStore"
TOKEN_STORE = "0x3::token::TokenStore"
DEPOSIT_EVENTS = "deposit_events"
WITHDRAW_EVENTS = "withdraw_events"

DEFAULT_AIRDROP_AMOUNT = 100_000_000

Address = Union[AccountAddress, str]
Payload = Union[TransactionPayload, EntryFunction]


@dataclass
class CoinBalance:
    """Balance held in one ``0x1::coin::CoinStore<...>`` resource."""

    coin: str
    value: int


@dataclass
class TransactionSummary:
    """The parts of a committed user transaction a wallet shows."""

    hash: str
    version: str
    sender: Optional[str]
    success: bool
    vm_status: str
    timestamp: str
    gas_used: str
    gas_unit_price: Optional[str]
    type: str
    payload: Optional[Dict[str, Any]]
    to_address: Optional[Any]
    amount: Optional[Any]

    @staticmethod
    def from_json(data: Dict[str, Any]) -> TransactionSummary:
        payload = data.get("payload")
        arguments = (payload or {}).get("arguments") or []
        return TransactionSummary(
            hash=data["hash"],
            version=data["version"],
            sender=data.get("sender"),
            success=data["success"],
            vm_status=data["vm_status"],
            timestamp=data["timestamp"],
            gas_used=data["gas_used"],
            gas_unit_price=data.get("gas_unit_price"),
            type=data["type"],
            payload=payload,
            to_address=arguments[0] if len(arguments) > 0 else None,
            amount=arguments[1] if len(arguments) > 1 else None,
        )


class WalletClient:
    """Wallet operations against one Aptos network.

    Attributes:
        client: The SDK REST client used for every node request.
        faucet: Faucet client, None when no faucet URL was given.
    """

    client: RestClient
    faucet: Optional[FaucetClient]

    def __init__(
        self,
        node_url: str,
        faucet_url: Optional[str] = None,
        client_config: Optional[ClientConfig] = None,
        faucet_auth_token: Optional[str] = None,
    ):
        self.client = RestClient(node_url, client_config or default_client_config())
        self.faucet = None
        if faucet_url:
            self.faucet = FaucetClient(faucet_url, self.client, faucet_auth_token)

    @staticmethod
    def from_config(config: WalletConfig) -> WalletClient:
        return WalletClient(
            config.node_url,
            config.faucet_url,
            config.client_config,
            config.faucet_auth_token,
        )

    async def close(self):
        await self.client.close()

    async def __aenter__(self) -> WalletClient:
        return self

    async def __aexit__(self, *exc_info):
        await self.close()

    #
    # Accounts
    #

    async def create_new_account(self) -> Tuple[Account, str]:
        """Create a new account together with the seed phrase that restores it."""
        mnemonic = generate_mnemonic()
        return account_from_mnemonic(mnemonic), mnemonic

    async def get_account_from_mnemonic(
        self, mnemonic: str, derivation_index: int = 0
    ) -> Account:
        """
        Restore the account at m/44'/637'/{derivation_index}'/0'/0'.

        :raises InvalidMnemonic: If the seed phrase is not valid.
        """
        return account_from_mnemonic(mnemonic, derivation_index)

    async def sign_message(self, account: Account, message: Union[str, bytes]) -> str:
        """Sign an arbitrary message, returning the 0x prefixed hex signature."""
        if isinstance(message, str):
            message = message.encode()
        return str(account.sign(message))

    #
    # Coins
    #

    async def balance(self, address: Address) -> List[CoinBalance]:
        """
        Balances of every coin registered in the account.

        :raises AccountNotFound: If the account does not exist on chain.
        """
        resources = await self.client.account_resources(_to_address(address))
        return [
            CoinBalance(resource["type"], int(resource["data"]["coin"]["value"]))
            for resource in resources
            if resource["type"].startswith(COIN_STORE)
        ]

    async def get_coin_info(self, coin_type: str) -> Dict[str, Any]:
        """The ``0x1::coin::CoinInfo`` of a coin, stored under its publishing account."""
        publisher = AccountAddress.from_str_relaxed(coin_type.split("::")[0])
        resource = await self.client.account_resource(
            publisher, f"0x1::coin::CoinInfo<{coin_type}>"
        )
        return resource["data"]

    async def verify_resource(self, address: Address, coin_type: str) -> bool:
        """Whether ``address`` has registered a CoinStore for ``coin_type``.

        Coin types are compared as parsed struct tags, so ``0x01::a::B`` and
        ``0x1::a::B`` name the same coin.
        """
        if not str(address):
            raise ValueError("Address can not be empty")
        try:
            resources = await self.client.account_resources(_to_address(address))
        except AccountNotFound:
            return False
        expected = StructTag.from_str(f"{COIN_STORE}<{coin_type}>")
        return any(
            StructTag.from_str(resource["type"]) == expected
            for resource in resources
            if resource["type"].startswith(f"{COIN_STORE}<")
        )

    async def airdrop(
        self, address: Address, amount: int = DEFAULT_AIRDROP_AMOUNT
    ) -> str:
        """Fund an account from the faucet, creating it if needed."""
        if self.faucet is None:
            raise FaucetNotConfigured()
        txn_hash = await self.faucet.fund_account(_to_address(address), amount)
        logging.info(f"Funded {address} with {amount}: {txn_hash}")
        return txn_hash

    async def aptos_transfer(
        self, account: Account, recipient: Address, amount: int
    ) -> str:
        """Transfer APT, creating the recipient account if it does not exist."""
        recipient = _to_address(recipient)
        _check_not_self(account, recipient)
        payload = EntryFunction.natural(
            "0x1::aptos_account",
            "transfer",
            [],
            [
                TransactionArgument(recipient, Serializer.struct),
                TransactionArgument(amount, Serializer.u64),
            ],
        )
        return await self.sign_and_submit_transaction(account, payload)

    async def transfer(
        self, account: Account, coin_type: str, recipient: Address, amount: int
    ) -> str:
        """Transfer any coin; the recipient must have registered it."""
        recipient = _to_address(recipient)
        _check_not_self(account, recipient)
        return await self.sign_and_submit_transaction(
            account, _coin_transfer(coin_type, recipient, amount)
        )

    async def estimate_gas_usage(
        self, account: Account, coin_type: str, recipient: Address, amount: int
    ) -> int:
        """Simulate a coin transfer and return the gas it would use."""
        recipient = _to_address(recipient)
        _check_not_self(account, recipient)
        raw_transaction = await self.client.create_bcs_transaction(
            account,
            TransactionPayload(_coin_transfer(coin_type, recipient, amount)),
        )
        simulation = await self.client.simulate_transaction(raw_transaction, account)
        return int(simulation[0]["gas_used"])

    async def register_coin(self, account: Account, coin_type: str) -> str:
        payload = EntryFunction.natural(
            "0x1::managed_coin",
            "register",
            [TypeTag(StructTag.from_str(coin_type))],
            [],
        )
        return await self.sign_and_submit_transaction(account, payload)

    #
    # Transactions
    #

    async def sign_transaction(
        self, account: Account, payload: Payload
    ) -> SignedTransaction:
        return await self.client.create_bcs_signed_transaction(
            account, _to_payload(payload)
        )

    async def submit_transaction(self, signed_transaction: SignedTransaction) -> str:
        return await self.client.submit_bcs_transaction(signed_transaction)

    async def sign_and_submit_transaction(
        self, account: Account, payload: Payload
    ) -> str:
        """Sign, submit and wait for a transaction; returns its hash."""
        signed_transaction = await self.sign_transaction(account, payload)
        txn_hash = await self.submit_transaction(signed_transaction)
        await self.client.wait_for_transaction(txn_hash)
        logging.debug(f"Committed {txn_hash} from {account.address()}")
        return txn_hash

    async def sign_and_submit_transactions(
        self, account: Account, payloads: Sequence[Payload]
    ) -> List[str]:
        """
        Run several transactions one after another.

        Each transaction is committed before the next one is signed, so the
        first failure is raised and the remaining payloads are not submitted.
        """
        hashes = []
        for payload in payloads:
            hashes.append(await self.sign_and_submit_transaction(account, payload))
        return hashes

    async def wait_for_transaction_result(self, txn_hash: str) -> Dict[str, Any]:
        await self.client.wait_for_transaction(txn_hash)
        return await self.client.transaction_by_hash(txn_hash)

    async def account_transactions(self, address: Address) -> List[TransactionSummary]:
        """Committed transactions sent by the account."""
        transactions = await self.client.transactions_by_account(_to_address(address))
        return [TransactionSummary.from_json(txn) for txn in transactions]

    async def get_transaction_details_by_version(self, version: int) -> Dict[str, Any]:
        return await self.client.transaction_by_version(version)

    async def get_transaction_details_by_hash(self, txn_hash: str) -> Dict[str, Any]:
        return await self.client.transaction_by_hash(txn_hash)

    #
    # Events
    #

    async def get_events(
        self,
        address: Address,
        event_handle: str,
        field_name: str,
        limit: Optional[int] = None,
        start: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """
        Events of one event handle field, e.g. ``0x3::token::TokenStore`` /
        ``deposit_events``.

        An account that never created the handle has no stream yet, which the
        node reports as a 404; that is returned as an empty list.

        :raises ApiError: For any other failure.
        """
        try:
            return await self.client.events_by_event_handle(
                _to_address(address), event_handle, field_name, limit, start
            )
        except ApiError as e:
            if e.status_code != 404:
                raise
            return []

    async def get_all_transactions(self, address: Address) -> List[Dict[str, Any]]:
        """Deposit and withdraw events of every coin store, newest first."""
        address = _to_address(address)
        resources = await self.client.account_resources(address)
        coin_stores = [r["type"] for r in resources if r["type"].startswith(COIN_STORE)]

        events: List[Dict[str, Any]] = []
        for coin_store in coin_stores:
            withdrawals, deposits = await asyncio.gather(
                self.get_events(address, coin_store, WITHDRAW_EVENTS),
                self.get_events(address, coin_store, DEPOSIT_EVENTS),
            )
            events.extend(withdrawals)
            events.extend(deposits)
        return sorted(events, key=lambda event: int(event["version"]), reverse=True)

    #
    # NFTs
    #

    async def create_collection(
        self,
        account: Account,
        name: str,
        description: str,
        uri: str,
        max_amount: int = U64_MAX,
    ) -> str:
        transaction_arguments = [
            TransactionArgument(name, Serializer.str),
            TransactionArgument(description, Serializer.str),
            TransactionArgument(uri, Serializer.str),
            TransactionArgument(max_amount, Serializer.u64),
            TransactionArgument(
                [False, False, False], Serializer.sequence_serializer(Serializer.bool)
            ),
        ]
        payload = EntryFunction.natural(
            "0x3::token",
            "create_collection_script",
            [],
            transaction_arguments,
        )
        return await self.sign_and_submit_transaction(account, payload)

    async def create_token(
        self,
        account: Account,
        collection_name: str,
        name: str,
        description: str,
        supply: int,
        uri: str,
        max_amount: int = U64_MAX,
        royalty_payee_address: Optional[Address] = None,
        royalty_points_denominator: int = 0,
        royalty_points_numerator: int = 0,
        property_keys: Optional[List[str]] = None,
        property_values: Optional[List[Any]] = None,
        property_types: Optional[List[str]] = None,
    ) -> str:
        """
        Mint a Token V1 token into an existing collection.

        Property values are BCS encoded according to their type: "bool", "u8",
        "u64", "u128", "address" and "0x1::string::String" are supported, raw
        ``bytes`` are passed through unchanged.
        """
        property_keys = property_keys or []
        property_values = property_values or []
        property_types = property_types or []
        if not len(property_keys) == len(property_values) == len(property_types):
            raise ValueError("Property keys, values and types must have the same length")

        payee = (
            account.address()
            if royalty_payee_address is None
            else _to_address(royalty_payee_address)
        )
        transaction_arguments = [
            TransactionArgument(collection_name, Serializer.str),
            TransactionArgument(name, Serializer.str),
            TransactionArgument(description, Serializer.str),
            TransactionArgument(supply, Serializer.u64),
            TransactionArgument(max_amount, Serializer.u64),
            TransactionArgument(uri, Serializer.str),
            TransactionArgument(payee, Serializer.struct),
            TransactionArgument(royalty_points_denominator, Serializer.u64),
            TransactionArgument(royalty_points_numerator, Serializer.u64),
            TransactionArgument(
                [False, False, False, False, False],
                Serializer.sequence_serializer(Serializer.bool),
            ),
            TransactionArgument(
                property_keys, Serializer.sequence_serializer(Serializer.str)
            ),
            TransactionArgument(
                [
                    _property_value_bytes(value, value_type)
                    for value, value_type in zip(property_values, property_types)
                ],
                Serializer.sequence_serializer(Serializer.to_bytes),
            ),
            TransactionArgument(
                property_types, Serializer.sequence_serializer(Serializer.str)
            ),
        ]
        payload = EntryFunction.natural(
            "0x3::token",
            "create_token_script",
            [],
            transaction_arguments,
        )
        return await self.sign_and_submit_transaction(account, payload)

    async def offer_token(
        self,
        account: Account,
        receiver: Address,
        creator: Address,
        collection_name: str,
        token_name: str,
        amount: int,
        property_version: int = 0,
    ) -> str:
        """Offer tokens to ``receiver``; they stay with ``account`` until claimed."""
        transaction_arguments = [
            TransactionArgument(_to_address(receiver), Serializer.struct),
            TransactionArgument(_to_address(creator), Serializer.struct),
            TransactionArgument(collection_name, Serializer.str),
            TransactionArgument(token_name, Serializer.str),
            TransactionArgument(property_version, Serializer.u64),
            TransactionArgument(amount, Serializer.u64),
        ]
        payload = EntryFunction.natural(
            "0x3::token_transfers",
            "offer_script",
            [],
            transaction_arguments,
        )
        return await self.sign_and_submit_transaction(account, payload)

    async def claim_token(
        self,
        account: Account,
        sender: Address,
        creator: Address,
        collection_name: str,
        token_name: str,
        property_version: int = 0,
    ) -> str:
        transaction_arguments = [
            TransactionArgument(_to_address(sender), Serializer.struct),
            TransactionArgument(_to_address(creator), Serializer.struct),
            TransactionArgument(collection_name, Serializer.str),
            TransactionArgument(token_name, Serializer.str),
            TransactionArgument(property_version, Serializer.u64),
        ]
        payload = EntryFunction.natural(
            "0x3::token_transfers",
            "claim_script",
            [],
            transaction_arguments,
        )
        return await self.sign_and_submit_transaction(account, payload)

    async def get_token_ids(self, address: Address) -> ReconciliationResult:
        """
        Token ids the account has held, with net counts from its TokenStore events.

        Both event streams are fetched concurrently. If either request fails
        the error is raised and nothing is reconciled.

        :raises InvalidEventFormat: If the node returned a malformed event.
        """
        address = _to_address(address)
        deposit_events, withdraw_events = await asyncio.gather(
            self.get_events(address, TOKEN_STORE, DEPOSIT_EVENTS),
            self.get_events(address, TOKEN_STORE, WITHDRAW_EVENTS),
        )
        logging.debug(
            f"{address}: {len(deposit_events)} deposit and "
            f"{len(withdraw_events)} withdraw token events"
        )
        return reconcile(deposit_events, withdraw_events)

    async def get_token_details(
        self, token_id: Dict[str, Any], resource_handle: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        ``TokenData`` of a token id, with its collection name added.

        :param token_id: A Token V1 ``TokenId`` as found in token events.
        :param resource_handle: Handle of the creator's token data table; looked
            up from the creator's ``0x3::token::Collections`` when omitted.
        """
        token_data_id = token_id["token_data_id"]
        if resource_handle is None:
            collections = await self.client.account_resource(
                AccountAddress.from_str_relaxed(token_data_id["creator"]),
                "0x3::token::Collections",
            )
            resource_handle = collections["data"]["token_data"]["handle"]

        token = await self.client.get_table_item(
            resource_handle,
            "0x3::token::TokenDataId",
            "0x3::token::TokenData",
            token_data_id,
        )
        token["collection"] = token_data_id["collection"]
        return token


def _to_address(address: Address) -> AccountAddress:
    if isinstance(address, AccountAddress):
        return address
    return AccountAddress.from_str_relaxed(address)


def _to_payload(payload: Payload) -> TransactionPayload:
    if isinstance(payload, EntryFunction):
        return TransactionPayload(payload)
    return payload


def _check_not_self(account: Account, recipient: AccountAddress):
    if recipient == account.address():
        raise SelfTransferError(recipient)


def _coin_transfer(
    coin_type: str, recipient: AccountAddress, amount: int
) -> EntryFunction:
    return EntryFunction.natural(
        "0x1::coin",
        "transfer",
        [TypeTag(StructTag.from_str(coin_type))],
        [
            TransactionArgument(recipient, Serializer.struct),
            TransactionArgument(amount, Serializer.u64),
        ],
    )


def _property_value_bytes(value: Any, value_type: str) -> bytes:
    if isinstance(value, bytes):
        return value
    ser = Serializer()
    if value_type == "bool":
        ser.bool(value)
    elif value_type == "u8":
        ser.u8(int(value))
    elif value_type == "u64":
        ser.u64(int(value))
    elif value_type == "u128":
        ser.u128(int(value))
    elif value_type == "address":
        ser.struct(_to_address(value))
    elif value_type in ("0x1::string::String", "string"):
        ser.str(value)
    else:
        raise ValueError(f"Unsupported property type {value_type}")
    return ser.output()


class SelfTransferError(ValueError):
    """The recipient of a transfer is the sender itself"""

    recipient: AccountAddress

    def __init__(self, recipient: AccountAddress):
        super().__init__(f"cannot transfer coins to self: {recipient}")
        self.recipient = recipient


class FaucetNotConfigured(Exception):
    """Airdrops need a faucet URL"""

    def __init__(self):
        super().__init__("No faucet URL configured for this network")


def _token_event(sequence_number: str, name: str) -> Dict[str, Any]:
    return {
        "version": "100",
        "sequence_number": sequence_number,
        "type": "0x3::token::DepositEvent",
        "data": {
            "id": {
                "token_data_id": {
                    "creator": "0xa",
                    "collection": "Shapes",
                    "name": name,
                },
                "property_version": "0",
            },
            "amount": "1",
        },
    }


class Test(unittest.IsolatedAsyncioTestCase):
    node_url = "https://fullnode.devnet.aptoslabs.com/v1"

    async def asyncSetUp(self):
        self.wallet = WalletClient(self.node_url, "https://faucet.devnet.aptoslabs.com")
        self.alice = Account.generate()
        self.bob = Account.generate()

    async def asyncTearDown(self):
        await self.wallet.close()

    def patch(self, target: str, **kwargs) -> unittest.mock.MagicMock:
        patcher = unittest.mock.patch(f"aptos_sdk.async_client.{target}", **kwargs)
        mock = patcher.start()
        self.addCleanup(patcher.stop)
        return mock

    def patch_submission(self, txn_hash: str = "0xfeed") -> unittest.mock.MagicMock:
        sign = self.patch(
            "RestClient.create_bcs_signed_transaction", return_value="signed"
        )
        self.patch("RestClient.submit_bcs_transaction", return_value=txn_hash)
        self.patch("RestClient.wait_for_transaction", return_value=None)
        return sign

    def submitted_entry_function(self, sign: unittest.mock.MagicMock) -> EntryFunction:
        (account, payload) = sign.call_args.args
        self.assertIsInstance(payload, TransactionPayload)
        return payload.value

    async def test_create_and_restore_account(self):
        account, mnemonic = await self.wallet.create_new_account()
        restored = await self.wallet.get_account_from_mnemonic(mnemonic)
        self.assertEqual(account, restored)
        other = await self.wallet.get_account_from_mnemonic(mnemonic, 1)
        self.assertNotEqual(account.address(), other.address())

    async def test_sign_message(self):
        signature = await self.wallet.sign_message(self.alice, "hello")
        self.assertTrue(signature.startswith("0x"))
        self.assertEqual(signature, str(self.alice.sign(b"hello")))

    async def test_get_events_missing_stream(self):
        get = self.patch(
            "RestClient._get",
            return_value=httpx.Response(404, json={"error_code": "resource_not_found"}),
        )
        events = await self.wallet.get_events(
            self.alice.address(), TOKEN_STORE, DEPOSIT_EVENTS
        )
        self.assertEqual(events, [])
        self.assertEqual(
            get.call_args.kwargs["endpoint"],
            f"accounts/{self.alice.address()}/events/{TOKEN_STORE}/{DEPOSIT_EVENTS}",
        )

    async def test_get_events_error(self):
        self.patch("RestClient._get", return_value=httpx.Response(500, text="boom"))
        with self.assertRaises(ApiError) as cm:
            await self.wallet.get_events(
                self.alice.address(), TOKEN_STORE, DEPOSIT_EVENTS
            )
        self.assertEqual(cm.exception.status_code, 500)

    async def test_get_token_ids(self):
        deposits = [
            _token_event("1", "Circle"),
            _token_event("2", "Square"),
            _token_event("3", "Circle"),
        ]
        withdrawals = [_token_event("1", "Circle")]

        def events(address, event_handle, field_name, limit=None, start=None):
            self.assertEqual(event_handle, TOKEN_STORE)
            return deposits if field_name == DEPOSIT_EVENTS else withdrawals

        self.patch("RestClient.events_by_event_handle", side_effect=events)
        result = await self.wallet.get_token_ids(str(self.alice.address()))

        self.assertEqual(result.max_deposit_sequence_number, 3)
        self.assertEqual(result.max_withdraw_sequence_number, 1)
        summary = [
            (
                entry.identifier["token_data_id"]["name"],
                entry.deposit_sequence_number,
                entry.withdraw_sequence_number,
                entry.net_count,
            )
            for entry in result.entries
        ]
        self.assertEqual(summary, [("Circle", "3", "1", 1), ("Square", "2", "-1", 1)])

    async def test_get_token_ids_without_token_store(self):
        self.patch("RestClient._get", return_value=httpx.Response(404, text="{}"))
        result = await self.wallet.get_token_ids(self.alice.address())
        self.assertEqual(result, ReconciliationResult([], -1, -1))

    async def test_get_token_ids_propagates_fetch_failure(self):
        def events(address, event_handle, field_name, limit=None, start=None):
            if field_name == WITHDRAW_EVENTS:
                raise ApiError("unavailable", 503)
            return [_token_event("1", "Circle")]

        self.patch("RestClient.events_by_event_handle", side_effect=events)
        with self.assertRaises(ApiError):
            await self.wallet.get_token_ids(self.alice.address())

    async def test_balance(self):
        self.patch(
            "RestClient.account_resources",
            return_value=[
                {"type": "0x1::account::Account", "data": {}},
                {
                    "type": "0x1::coin::CoinStore<0x1::aptos_coin::AptosCoin>",
                    "data": {"coin": {"value": "1500"}},
                },
            ],
        )
        balances = await self.wallet.balance(self.alice.address())
        self.assertEqual(
            balances,
            [CoinBalance("0x1::coin::CoinStore<0x1::aptos_coin::AptosCoin>", 1500)],
        )

    async def test_verify_resource(self):
        self.patch(
            "RestClient.account_resources",
            return_value=[
                {
                    "type": "0x1::coin::CoinStore<0x1::aptos_coin::AptosCoin>",
                    "data": {"coin": {"value": "0"}},
                }
            ],
        )
        address = self.alice.address()
        self.assertTrue(
            await self.wallet.verify_resource(address, "0x1::aptos_coin::AptosCoin")
        )
        self.assertFalse(await self.wallet.verify_resource(address, "0xcafe::usd::USD"))
        self.assertTrue(
            await self.wallet.verify_resource(address, "0x01::aptos_coin::AptosCoin")
        )
        with self.assertRaises(ValueError):
            await self.wallet.verify_resource("", "0x1::aptos_coin::AptosCoin")

    async def test_verify_resource_unknown_account(self):
        self.patch(
            "RestClient.account_resources",
            side_effect=AccountNotFound("0x5", AccountAddress.from_str("0x5")),
        )
        self.assertFalse(
            await self.wallet.verify_resource("0x5", "0x1::aptos_coin::AptosCoin")
        )

    async def test_get_coin_info(self):
        resource = self.patch(
            "RestClient.account_resource",
            return_value={"data": {"name": "Aptos Coin", "decimals": 8}},
        )
        info = await self.wallet.get_coin_info("0x1::aptos_coin::AptosCoin")
        self.assertEqual(info["decimals"], 8)
        (address, resource_type) = resource.call_args.args
        self.assertEqual(address, AccountAddress.from_str("0x1"))
        self.assertEqual(resource_type, "0x1::coin::CoinInfo<0x1::aptos_coin::AptosCoin>")

    async def test_airdrop(self):
        fund = self.patch("FaucetClient.fund_account", return_value="0xbeef")
        self.assertEqual(await self.wallet.airdrop(self.alice.address()), "0xbeef")
        self.assertEqual(
            fund.call_args.args, (self.alice.address(), DEFAULT_AIRDROP_AMOUNT)
        )

    async def test_airdrop_without_faucet(self):
        wallet = WalletClient(self.node_url)
        with self.assertRaises(FaucetNotConfigured):
            await wallet.airdrop(self.alice.address())
        await wallet.close()

    async def test_aptos_transfer(self):
        sign = self.patch_submission()
        txn_hash = await self.wallet.aptos_transfer(
            self.alice, self.bob.address(), 1_000
        )
        self.assertEqual(txn_hash, "0xfeed")
        entry_function = self.submitted_entry_function(sign)
        self.assertEqual(str(entry_function.module), "0x1::aptos_account")
        self.assertEqual(entry_function.function, "transfer")

    async def test_transfer(self):
        sign = self.patch_submission()
        await self.wallet.transfer(
            self.alice, "0x1::aptos_coin::AptosCoin", str(self.bob.address()), 888
        )
        entry_function = self.submitted_entry_function(sign)
        self.assertEqual(str(entry_function.module), "0x1::coin")
        self.assertEqual(entry_function.function, "transfer")
        self.assertEqual(len(entry_function.ty_args), 1)

    async def test_transfer_to_self(self):
        sign = self.patch_submission()
        with self.assertRaises(SelfTransferError):
            await self.wallet.transfer(
                self.alice, "0x1::aptos_coin::AptosCoin", self.alice.address(), 1
            )
        with self.assertRaises(SelfTransferError):
            await self.wallet.aptos_transfer(
                self.alice, str(self.alice.address()), 1
            )
        sign.assert_not_called()

    async def test_estimate_gas_usage(self):
        self.patch("RestClient.create_bcs_transaction", return_value="raw")
        simulate = self.patch(
            "RestClient.simulate_transaction", return_value=[{"gas_used": "9"}]
        )
        gas = await self.wallet.estimate_gas_usage(
            self.alice, "0x1::aptos_coin::AptosCoin", self.bob.address(), 5
        )
        self.assertEqual(gas, 9)
        self.assertEqual(simulate.call_args.args, ("raw", self.alice))

    async def test_sign_and_submit_transactions_stops_at_failure(self):
        self.patch("RestClient.create_bcs_signed_transaction", return_value="signed")
        self.patch(
            "RestClient.submit_bcs_transaction",
            side_effect=["0x1", ApiError("rejected", 400), "0x3"],
        )
        self.patch("RestClient.wait_for_transaction", return_value=None)
        payload = EntryFunction.natural(
            "0x1::managed_coin",
            "register",
            [TypeTag(StructTag.from_str("0x1::aptos_coin::AptosCoin"))],
            [],
        )
        self.assertEqual(
            await self.wallet.sign_and_submit_transactions(self.alice, [payload]),
            ["0x1"],
        )
        with self.assertRaises(ApiError):
            await self.wallet.sign_and_submit_transactions(
                self.alice, [payload, payload]
            )

    async def test_nft_operations(self):
        sign = self.patch_submission()

        await self.wallet.create_collection(self.alice, "Shapes", "desc", "https://a")
        entry_function = self.submitted_entry_function(sign)
        self.assertEqual(str(entry_function.module), "0x3::token")
        self.assertEqual(entry_function.function, "create_collection_script")

        await self.wallet.create_token(
            self.alice,
            "Shapes",
            "Circle",
            "desc",
            1,
            "https://a/circle",
            property_keys=["sides"],
            property_values=[0],
            property_types=["u64"],
        )
        entry_function = self.submitted_entry_function(sign)
        self.assertEqual(entry_function.function, "create_token_script")
        self.assertEqual(len(entry_function.args), 13)

        await self.wallet.offer_token(
            self.alice, self.bob.address(), self.alice.address(), "Shapes", "Circle", 1
        )
        entry_function = self.submitted_entry_function(sign)
        self.assertEqual(str(entry_function.module), "0x3::token_transfers")
        self.assertEqual(entry_function.function, "offer_script")

        await self.wallet.claim_token(
            self.bob, self.alice.address(), self.alice.address(), "Shapes", "Circle"
        )
        (account, payload) = sign.call_args.args
        self.assertEqual(account, self.bob)
        self.assertEqual(payload.value.function, "claim_script")

    async def test_create_token_property_mismatch(self):
        with self.assertRaises(ValueError):
            await self.wallet.create_token(
                self.alice, "Shapes", "Circle", "", 1, "", property_keys=["a"]
            )

    async def test_get_token_details(self):
        self.patch(
            "RestClient.account_resource",
            return_value={"data": {"token_data": {"handle": "0x99"}}},
        )
        table = self.patch(
            "RestClient.get_table_item", return_value={"name": "Circle", "supply": "1"}
        )
        token_id = _token_event("0", "Circle")["data"]["id"]
        token = await self.wallet.get_token_details(token_id)
        self.assertEqual(token["collection"], "Shapes")
        self.assertEqual(table.call_args.args[0], "0x99")
        self.assertEqual(table.call_args.args[3], token_id["token_data_id"])

    async def test_get_token_details_with_handle(self):
        collections = self.patch("RestClient.account_resource")
        table = self.patch("RestClient.get_table_item", return_value={"name": "Square"})
        token_id = _token_event("0", "Square")["data"]["id"]
        token = await self.wallet.get_token_details(token_id, "0x42")
        self.assertEqual(token, {"name": "Square", "collection": "Shapes"})
        self.assertEqual(table.call_args.args[0], "0x42")
        collections.assert_not_called()

    async def test_account_transactions(self):
        self.patch(
            "RestClient.transactions_by_account",
            return_value=[
                {
                    "type": "user_transaction",
                    "hash": "0x1",
                    "version": "10",
                    "sender": "0xa",
                    "success": True,
                    "vm_status": "Executed successfully",
                    "timestamp": "1",
                    "gas_used": "5",
                    "gas_unit_price": "100",
                    "payload": {
                        "function": "0x1::aptos_account::transfer",
                        "arguments": ["0xb", "888"],
                    },
                }
            ],
        )
        [summary] = await self.wallet.account_transactions(self.alice.address())
        self.assertEqual(summary.to_address, "0xb")
        self.assertEqual(summary.amount, "888")
        self.assertTrue(summary.success)

    async def test_get_all_transactions(self):
        coin_store = "0x1::coin::CoinStore<0x1::aptos_coin::AptosCoin>"
        self.patch(
            "RestClient.account_resources",
            return_value=[{"type": coin_store, "data": {"coin": {"value": "1"}}}],
        )

        def events(address, event_handle, field_name, limit=None, start=None):
            self.assertEqual(event_handle, coin_store)
            if field_name == WITHDRAW_EVENTS:
                return [{"version": "9"}, {"version": "30"}]
            return [{"version": "100"}]

        self.patch("RestClient.events_by_event_handle", side_effect=events)
        events_found = await self.wallet.get_all_transactions(self.alice.address())
        self.assertEqual([e["version"] for e in events_found], ["100", "30", "9"])


if __name__ == "__main__":
    unittest.main()
