import typing

from behave import given, then, use_step_matcher, when

from aptos_wallet.event_reconciler import (
    InvalidEventFormat,
    TokenOwnership,
    reconcile,
)

# Use regular expressions
use_step_matcher("re")


@given(r"(?P<side>deposit|withdraw) events \[(?P<events>.*)]")
def given_events(context: typing.Any, side: str, events: str):
    setattr(context, side, parse_events(events))


@given(r"a (?P<side>deposit|withdraw) event without a token id")
def given_event_without_id(context: typing.Any, side: str):
    getattr(context, side).append({"sequence_number": "99", "data": {}})


@given(r"a (?P<side>deposit|withdraw) event with a null token id")
def given_event_with_null_id(context: typing.Any, side: str):
    getattr(context, side).append({"sequence_number": "99", "data": {"id": None}})


@when(r"I reconcile the token events")
def when_reconcile(context: typing.Any):
    context.error = None
    context.output = None
    try:
        context.output = reconcile(context.deposit, context.withdraw)
    except InvalidEventFormat as e:
        context.error = e


@then(r"there should be no tokens")
def then_no_tokens(context: typing.Any):
    assert context.output.entries == [], "Expected no tokens but got " + str(
        context.output.entries
    )


@then(r"the tokens should be \[(?P<names>.*)]")
def then_tokens(context: typing.Any, names: str):
    expected = names.split(",")
    actual = [entry.identifier["token_data_id"]["name"] for entry in context.output.entries]
    assert actual == expected, "Expected " + str(expected) + " but got " + str(actual)


@then(
    r"token (?P<name>\w+) should have deposit (?P<deposit>-?\d+), "
    r"withdraw (?P<withdraw>-?\d+) and net count (?P<net>-?\d+)"
)
def then_token(context: typing.Any, name: str, deposit: str, withdraw: str, net: str):
    expected = TokenOwnership(token_id(name), deposit, withdraw, int(net))
    matches = [
        entry
        for entry in context.output.entries
        if entry.identifier["token_data_id"]["name"] == name
    ]
    assert matches == [expected], (
        "Expected " + str(expected) + " but got " + str(matches)
    )


@then(r"the max (?P<side>deposit|withdraw) sequence number should be (?P<value>-?\d+)")
def then_max(context: typing.Any, side: str, value: str):
    actual = getattr(context.output, f"max_{side}_sequence_number")
    assert actual == int(value), "Expected " + value + " but got " + str(actual)


@then(r"the events should be rejected as malformed")
def then_rejected(context: typing.Any):
    assert isinstance(context.error, InvalidEventFormat), "Expected InvalidEventFormat"
    assert context.output is None, "Expected no result"


def parse_events(input_value: str) -> typing.List[typing.Dict[str, typing.Any]]:
    events: typing.List[typing.Dict[str, typing.Any]] = []

    # Skip early if there are no values
    if len(input_value) == 0:
        return events

    for val in input_value.split(","):
        (sequence_number, name) = val.split(":")
        events.append({"sequence_number": sequence_number, "data": {"id": token_id(name)}})

    return events


def token_id(name: str) -> typing.Dict[str, typing.Any]:
    return {
        "token_data_id": {"creator": "0xa", "collection": "Shapes", "name": name},
        "property_version": "0",
    }
