import asyncio

import pytest

from rendezvous.relay import SignalingRelay
from tests.conftest import WALLET_A, WALLET_B


@pytest.fixture
def paired(registry):
    registry.match_or_enqueue("conn-a", WALLET_A)
    registry.match_or_enqueue("conn-b", WALLET_B)
    return registry


@pytest.fixture
def relay(registry, hub):
    return SignalingRelay(registry, hub)


def test_forwards_sanitized_signal_to_peer_only(paired, relay, hub):
    payload = {"signal": {"type": "offer", "sdp": "v=0...", "junkField": 1}, "peer": "x"}

    assert asyncio.run(relay.on_signal("conn-b", payload)) is True

    assert hub.sent == [
        (
            "conn-a",
            "signal",
            {
                "signal": {
                    "type": "offer",
                    "sdp": "v=0...",
                    "candidate": None,
                    "usernameFragment": None,
                    "sdpMLineIndex": None,
                    "sdpMid": None,
                }
            },
        )
    ]


def test_relay_works_in_both_directions(paired, relay, hub):
    asyncio.run(relay.on_signal("conn-b", {"signal": {"type": "offer", "sdp": "o"}}))
    asyncio.run(relay.on_signal("conn-a", {"signal": {"type": "answer", "sdp": "a"}}))

    assert [cid for cid, _, _ in hub.sent] == ["conn-a", "conn-b"]
    assert hub.sent[1][2]["signal"]["type"] == "answer"


def test_unpaired_sender_is_dropped(registry, relay, hub):
    registry.match_or_enqueue("conn-a", WALLET_A)

    assert asyncio.run(relay.on_signal("conn-a", {"signal": {"type": "offer"}})) is False
    assert asyncio.run(relay.on_signal("stranger", {"signal": {"type": "offer"}})) is False
    assert hub.sent == []


@pytest.mark.parametrize(
    "payload",
    [None, {}, {"signal": "offer"}, {"signal": {"type": "offer"}, "peer": 3}, ["signal"]],
)
def test_malformed_payload_is_dropped(paired, relay, hub, payload):
    assert asyncio.run(relay.on_signal("conn-b", payload)) is False
    assert hub.sent == []


def test_vanished_peer_is_not_an_error(paired, relay, hub):
    hub.gone.add("conn-a")

    assert asyncio.run(relay.on_signal("conn-b", {"signal": {"type": "offer"}})) is False
    assert hub.sent == []
