# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Token ownership reconciliation from TokenStore event streams.

A Token V1 ``0x3::token::TokenStore`` emits a ``deposit_events`` entry every
time a token lands in the store and a ``withdraw_events`` entry every time one
leaves it. Replaying both logs gives the set of tokens an account has touched
and, per token, how many it should still hold.

The reconciliation is a single pass over each log:

- every event's ``data.id`` is keyed by its canonical JSON form,
- deposits and withdrawals are counted per key, remembering the sequence
  number of the last event seen for that key,
- the highest sequence number of each log is tracked numerically.

Examples:
    Reconcile two logs fetched from a full node::

        from aptos_wallet.event_reconciler import reconcile

        deposits = await wallet.get_events(
            address, "0x3::token::TokenStore", "deposit_events"
        )
        withdrawals = await wallet.get_events(
            address, "0x3::token::TokenStore", "withdraw_events"
        )
        result = reconcile(deposits, withdrawals)
        held = [entry for entry in result.entries if entry.net_count > 0]

Note:
    Net counts are implied by event history only; they are not an
    authoritative on-chain balance.
"""

from __future__ import annotations

import json
import re
import unittest
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

U64_MAX = 18446744073709551615

NO_SEQUENCE_NUMBER = "-1"

_DIGITS = re.compile(r"[0-9]+")


@dataclass
class TokenOwnership:
    """Net holding of one token identifier across both event logs.

    Attributes:
        identifier: The ``data.id`` value exactly as found in the events.
        deposit_sequence_number: Sequence number of the last deposit event
            processed for this identifier, or "-1" if it was never deposited.
        withdraw_sequence_number: Sequence number of the last withdraw event
            processed for this identifier, or "-1" if it was never withdrawn.
        net_count: Number of deposits minus number of withdrawals.
    """

    identifier: Any
    deposit_sequence_number: str
    withdraw_sequence_number: str
    net_count: int


@dataclass
class ReconciliationResult:
    """Output of :func:`reconcile`."""

    entries: List[TokenOwnership] = field(default_factory=list)
    max_deposit_sequence_number: int = -1
    max_withdraw_sequence_number: int = -1

    def held(self) -> List[TokenOwnership]:
        """Entries with a positive net count."""
        return [entry for entry in self.entries if entry.net_count > 0]


@dataclass
class _AggregationEntry:
    count: int
    last_sequence_number: str
    identifier: Any


def canonical_identifier(identifier: Any) -> str:
    """Deterministic string form of a token identifier, used as a mapping key."""
    return json.dumps(identifier, sort_keys=True, separators=(",", ":"))


def reconcile(
    deposit_events: Sequence[Mapping[str, Any]],
    withdraw_events: Sequence[Mapping[str, Any]],
) -> ReconciliationResult:
    """Compute net token ownership from a deposit log and a withdraw log.

    Identifiers are emitted in the order they are first encountered, scanning
    the deposit log before the withdraw log.

    :param deposit_events: Events from the ``deposit_events`` stream, in log order.
    :param withdraw_events: Events from the ``withdraw_events`` stream, in log order.
    :return: One entry per distinct identifier plus the maximum sequence
        number of each log (-1 for an empty log).
    :raises InvalidEventFormat: If any event lacks ``data.id`` or carries a
        sequence number that is not a u64. No partial result is produced.
    """
    seen: Dict[str, None] = {}
    deposits: Dict[str, _AggregationEntry] = {}
    withdrawals: Dict[str, _AggregationEntry] = {}

    max_deposit = _aggregate(deposit_events, deposits, seen)
    max_withdraw = _aggregate(withdraw_events, withdrawals, seen)

    entries = []
    for key in seen:
        deposit = deposits.get(key)
        withdraw = withdrawals.get(key)
        source = deposit or withdrawals[key]
        entries.append(
            TokenOwnership(
                identifier=source.identifier,
                deposit_sequence_number=(
                    deposit.last_sequence_number if deposit else NO_SEQUENCE_NUMBER
                ),
                withdraw_sequence_number=(
                    withdraw.last_sequence_number if withdraw else NO_SEQUENCE_NUMBER
                ),
                net_count=(deposit.count if deposit else 0)
                - (withdraw.count if withdraw else 0),
            )
        )

    return ReconciliationResult(entries, max_deposit, max_withdraw)


def _aggregate(
    events: Sequence[Mapping[str, Any]],
    counts: Dict[str, _AggregationEntry],
    seen: Dict[str, None],
) -> int:
    maximum = -1
    for index, event in enumerate(events):
        identifier, raw, sequence_number = _parse_event(event, index)
        key = canonical_identifier(identifier)
        seen.setdefault(key, None)

        entry = counts.get(key)
        if entry is None:
            counts[key] = _AggregationEntry(1, raw, identifier)
        else:
            entry.count += 1
            entry.last_sequence_number = raw

        maximum = max(maximum, sequence_number)
    return maximum


def _parse_event(event: Any, index: int) -> tuple:
    if not isinstance(event, Mapping):
        raise InvalidEventFormat("event is not an object", index)

    data = event.get("data")
    if not isinstance(data, Mapping) or data.get("id") is None:
        raise InvalidEventFormat("event is missing data.id", index)
    identifier = data["id"]
    try:
        canonical_identifier(identifier)
    except (TypeError, ValueError) as e:
        raise InvalidEventFormat(f"data.id is not serializable: {e}", index)

    raw = event.get("sequence_number")
    if isinstance(raw, bool):
        sequence_number: Optional[int] = None
    elif isinstance(raw, int):
        sequence_number = raw
    elif isinstance(raw, str) and _DIGITS.fullmatch(raw):
        sequence_number = int(raw)
    else:
        sequence_number = None
    if sequence_number is None or not 0 <= sequence_number <= U64_MAX:
        raise InvalidEventFormat(f"invalid sequence_number {raw!r}", index)

    # Node strings are kept as sent
    return identifier, raw if isinstance(raw, str) else str(raw), sequence_number


class InvalidEventFormat(ValueError):
    """An event log entry could not be interpreted."""

    index: int

    def __init__(self, message: str, index: int):
        super().__init__(f"{message} (event #{index})")
        self.index = index


def _token_id(creator: str, collection: str, name: str, version: str = "0") -> dict:
    return {
        "token_data_id": {
            "creator": creator,
            "collection": collection,
            "name": name,
        },
        "property_version": version,
    }


def _event(sequence_number: Any, token_id: Any) -> dict:
    return {
        "sequence_number": sequence_number,
        "type": "0x3::token::DepositEvent",
        "data": {"id": token_id, "amount": "1"},
    }


class Test(unittest.TestCase):
    token_a = _token_id("0xa", "Shapes", "Circle")
    token_b = _token_id("0xa", "Shapes", "Square")
    token_c = _token_id("0xb", "Colors", "Red")

    def test_empty(self):
        result = reconcile([], [])
        self.assertEqual(result.entries, [])
        self.assertEqual(result.max_deposit_sequence_number, -1)
        self.assertEqual(result.max_withdraw_sequence_number, -1)

    def test_deposits_and_withdrawals(self):
        deposits = [
            _event("1", self.token_a),
            _event("2", self.token_b),
            _event("3", self.token_a),
        ]
        withdrawals = [_event("1", self.token_a)]

        result = reconcile(deposits, withdrawals)

        self.assertEqual(
            result.entries,
            [
                TokenOwnership(self.token_a, "3", "1", 1),
                TokenOwnership(self.token_b, "2", "-1", 1),
            ],
        )
        self.assertEqual(result.max_deposit_sequence_number, 3)
        self.assertEqual(result.max_withdraw_sequence_number, 1)

    def test_deposit_only(self):
        result = reconcile([_event("5", self.token_a), _event("7", self.token_a)], [])
        self.assertEqual(result.entries, [TokenOwnership(self.token_a, "7", "-1", 2)])
        self.assertEqual(result.max_withdraw_sequence_number, -1)

    def test_withdraw_only(self):
        result = reconcile([], [_event("4", self.token_c), _event("9", self.token_c)])
        self.assertEqual(result.entries, [TokenOwnership(self.token_c, "-1", "9", -2)])
        self.assertEqual(result.max_deposit_sequence_number, -1)
        self.assertEqual(result.max_withdraw_sequence_number, 9)

    def test_numeric_maximum(self):
        deposits = [
            _event("2", self.token_a),
            _event("10", self.token_b),
            _event("3", self.token_c),
        ]
        self.assertEqual(reconcile(deposits, []).max_deposit_sequence_number, 10)

    def test_last_processed_sequence_number_wins(self):
        deposits = [_event("8", self.token_a), _event("2", self.token_a)]
        result = reconcile(deposits, [])
        self.assertEqual(result.entries[0].deposit_sequence_number, "2")
        self.assertEqual(result.max_deposit_sequence_number, 8)

    def test_order_of_first_encounter(self):
        deposits = [_event("0", self.token_b), _event("1", self.token_a)]
        withdrawals = [_event("0", self.token_c), _event("1", self.token_b)]
        result = reconcile(deposits, withdrawals)
        self.assertEqual(
            [entry.identifier for entry in result.entries],
            [self.token_b, self.token_a, self.token_c],
        )
        self.assertEqual(result.held(), result.entries[1:2])

    def test_per_identifier_counts(self):
        deposits = [_event(str(n), self.token_a) for n in range(4)]
        deposits += [_event("4", self.token_b)]
        withdrawals = [_event(str(n), self.token_a) for n in range(3)]
        withdrawals += [_event("3", self.token_b), _event("4", self.token_c)]

        by_key = {
            canonical_identifier(entry.identifier): entry.net_count
            for entry in reconcile(deposits, withdrawals).entries
        }
        self.assertEqual(
            by_key,
            {
                canonical_identifier(self.token_a): 1,
                canonical_identifier(self.token_b): 0,
                canonical_identifier(self.token_c): -1,
            },
        )

    def test_key_order_does_not_split_identifiers(self):
        reordered = {
            "property_version": "0",
            "token_data_id": {"name": "Circle", "collection": "Shapes", "creator": "0xa"},
        }
        result = reconcile([_event("0", self.token_a)], [_event("0", reordered)])
        self.assertEqual(len(result.entries), 1)
        self.assertEqual(result.entries[0].net_count, 0)
        self.assertEqual(result.entries[0].identifier, self.token_a)

    def test_integer_sequence_numbers(self):
        result = reconcile([_event(12, self.token_a)], [])
        self.assertEqual(result.entries[0].deposit_sequence_number, "12")
        self.assertEqual(result.max_deposit_sequence_number, 12)

    def test_missing_id(self):
        deposits = [_event("0", self.token_a), {"sequence_number": "1", "data": {}}]
        with self.assertRaises(InvalidEventFormat) as cm:
            reconcile(deposits, [])
        self.assertEqual(cm.exception.index, 1)

    def test_null_id(self):
        deposits = [_event("0", self.token_a), _event("1", None)]
        with self.assertRaises(InvalidEventFormat) as cm:
            reconcile(deposits, [])
        self.assertEqual(cm.exception.index, 1)
        with self.assertRaises(InvalidEventFormat):
            reconcile([], [_event("0", None)])

    def test_sequence_number_text_is_kept(self):
        result = reconcile([_event("007", self.token_a)], [_event("010", self.token_a)])
        self.assertEqual(result.entries, [TokenOwnership(self.token_a, "007", "010", 0)])
        self.assertEqual(result.max_deposit_sequence_number, 7)
        self.assertEqual(result.max_withdraw_sequence_number, 10)

    def test_missing_data(self):
        with self.assertRaises(InvalidEventFormat):
            reconcile([], [{"sequence_number": "1"}])

    def test_invalid_sequence_numbers(self):
        for bad in [None, "", "-1", "1.5", "0x10", " 3", "1_000", True, -4, str(U64_MAX + 1)]:
            with self.subTest(sequence_number=bad):
                with self.assertRaises(InvalidEventFormat):
                    reconcile([_event(bad, self.token_a)], [])

    def test_not_an_object(self):
        with self.assertRaises(InvalidEventFormat):
            reconcile(["0x3::token::DepositEvent"], [])

    def test_u64_max(self):
        result = reconcile([_event(str(U64_MAX), self.token_a)], [])
        self.assertEqual(result.max_deposit_sequence_number, U64_MAX)


if __name__ == "__main__":
    unittest.main()
