import pytest

from rendezvous.registry import SessionRegistry, WaitingEntry

WALLET_A = "4Nd1mBQtrMJVYVfKf2PJy9NZUZdTAsp7D4xWLs4gDB4T"
WALLET_B = "9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM"
WALLET_C = "HN7cABqLq46Es1jh92dQQisAq662SmxELLLsHHe4YWrH"
WALLET_D = "3yFwqXBfZY4jBVUafQ1YEXw189y2dN3V5KQq9uzBDy1E"


class FakeClock:
    def __init__(self, now: float = 1_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingHub:
    """Stand-in for ConnectionHub that records every emit."""

    def __init__(self):
        self.sent = []
        self.gone = set()

    async def emit(self, connection_id, event, data=None):
        if connection_id in self.gone:
            return False
        self.sent.append((connection_id, event, data))
        return True

    def events_for(self, connection_id):
        return [(event, data) for cid, event, data in self.sent if cid == connection_id]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def registry(clock):
    return SessionRegistry(clock=clock)


@pytest.fixture
def hub():
    return RecordingHub()


def seed_waiting(registry, connection_id, wallet_address, enqueued_at):
    """Place an entry straight into the waiting queue.

    ``match_or_enqueue`` never leaves two different wallets waiting, so
    ordering scenarios have to be set up by hand.
    """
    registry._waiting[wallet_address] = WaitingEntry(
        connection_id=connection_id,
        wallet_address=wallet_address,
        enqueued_at=enqueued_at,
    )
