import pytest

from pokt_relay.crypto import PrivateKey
from pokt_relay.relay import RelayClient
from pokt_relay.session import SessionState
from pokt_relay.transport.transport_base import BaseTransport, RelayResponse
from pokt_relay.transport.transport_local import LocalAdapter


class FakeTransport(BaseTransport):
    """Answers every relay with a canned response (or raises it)."""
    name = "fake"

    def __init__(self, node_key=None, response=None, height=0):
        self.node_key = node_key
        self.response = response
        self.height = height
        self.submitted = []
        self.node_queries = []

    def query_height(self):
        return self.height

    def query_node(self, address):
        self.node_queries.append(address)
        if self.node_key is None:
            return None
        return {"address": address, "public_key": self.node_key.public_key().raw_hex(), "chains": ["0021"]}

    def submit_relay(self, payload, meta, proof):
        self.submitted.append((payload, meta, proof))
        if isinstance(self.response, Exception):
            raise self.response
        return self.response


@pytest.fixture
def servicer_key():
    return PrivateKey.generate()


@pytest.fixture
def app_key():
    return PrivateKey.generate()


@pytest.fixture
def node(servicer_key):
    return LocalAdapter(servicer_key, session_height=0)


@pytest.fixture
def client(servicer_key, app_key, node):
    return RelayClient(servicer_key, [app_key], node, session=SessionState())


def canned(status_code, body=""):
    return RelayResponse(status_code=status_code, body=body)
