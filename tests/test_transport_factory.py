import json

import pytest
import requests

from pokt_relay.config import RelayConfig
from pokt_relay.crypto import PrivateKey
from pokt_relay.directory import NodeDirectory
from pokt_relay.envelope import RelayMetadata, RelayPayload
from pokt_relay.errors import TransportError, TransportPermanentError, TransportTransientError
from pokt_relay.proof import build_aat, build_proof, request_hash
from pokt_relay.transport import transport_factory
from pokt_relay.transport.transport_http import HTTPAdapter
from pokt_relay.transport.transport_local import LocalAdapter

# CMD Line Usage: pytest -v -s --log-cli-level=DEBUG .\tests\test_transport_factory.py


class FakeHTTPResponse:
    def __init__(self, status_code, text="", reason="OK"):
        self.status_code = status_code
        self.text = text
        self.reason = reason

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        return json.loads(self.text)


class FakeSession:
    def __init__(self, response=None, exc=None):
        self.response = response
        self.exc = exc
        self.calls = []

    def post(self, url, data=None, headers=None, timeout=None):
        self.calls.append({"url": url, "data": data, "headers": headers, "timeout": timeout})
        if self.exc:
            raise self.exc
        return self.response

    def close(self):
        pass


def _signed_relay():
    key = PrivateKey.generate()
    payload = RelayPayload(data='{"id":1}')
    meta = RelayMetadata(3)
    aat = build_aat(PrivateKey.generate(), key.public_key().raw_hex())
    proof = build_proof(key, key.public_key().raw_hex(), "0021", request_hash(payload, meta), 3, aat)
    return payload, meta, proof


def test_transport_factory_modes(monkeypatch):
    """Verify that transport_factory returns the adapter named by POKT_TRANSPORT."""
    monkeypatch.delenv("POKT_TRANSPORT", raising=False)
    assert isinstance(transport_factory(), HTTPAdapter)

    monkeypatch.setenv("POKT_TRANSPORT", "http")
    monkeypatch.setenv("POKT_ENDPOINT", "http://node:8081/")
    adapter = transport_factory()
    assert isinstance(adapter, HTTPAdapter)
    assert adapter.base_url == "http://node:8081"

    monkeypatch.setenv("POKT_TRANSPORT", "carrier-pigeon")
    with pytest.raises(ValueError):
        transport_factory()


def test_transport_factory_from_config():
    key = PrivateKey.generate()
    config = RelayConfig(servicer_private_key=key.to_hex(), app_private_keys=[key.to_hex()], transport="local")
    local = transport_factory(config)
    assert isinstance(local, LocalAdapter)
    assert local.public_key == key.public_key().raw_hex()


def test_http_relay_posts_canonical_bytes():
    payload, meta, proof = _signed_relay()
    session = FakeSession(FakeHTTPResponse(200, '{"response":"ok","signature":""}'))
    adapter = HTTPAdapter("http://node:8081", timeout=3, session=session)

    res = adapter.submit_relay(payload, meta, proof)
    assert res.status_code == 200
    assert res.body == '{"response":"ok","signature":""}'

    call = session.calls[0]
    assert call["url"] == "http://node:8081/v1/client/relay"
    assert call["headers"]["Content-Type"] == "application/json"
    assert call["timeout"] == 3
    sent = json.loads(call["data"])
    assert sent["proof"]["request_hash"] == proof.request_hash
    assert sent["meta"] == {"block_height": 3}


def test_http_relay_parses_dispatch_correction():
    payload, meta, proof = _signed_relay()
    body = {
        "error": {"code": 14, "message": "the block height passed is invalid"},
        "dispatch": {"session": {"header": {"session_height": 9}}},
    }
    adapter = HTTPAdapter("http://node", session=FakeSession(FakeHTTPResponse(400, json.dumps(body), "Bad Request")))
    res = adapter.submit_relay(payload, meta, proof)
    assert res.status_class == 4
    assert res.corrected_height() == 9
    assert res.error_message() == "the block height passed is invalid"


def test_http_connection_error_is_transient():
    payload, meta, proof = _signed_relay()
    adapter = HTTPAdapter("http://node", session=FakeSession(exc=requests.ConnectionError("refused")))
    with pytest.raises(TransportTransientError):
        adapter.submit_relay(payload, meta, proof)


def test_http_other_request_errors():
    adapter = HTTPAdapter("http://node", session=FakeSession(exc=requests.TooManyRedirects("loop")))
    with pytest.raises(TransportError):
        adapter.query_height()


def test_http_query_height():
    session = FakeSession(FakeHTTPResponse(200, '{"height":1234}'))
    assert HTTPAdapter("http://node", session=session).query_height() == 1234
    assert session.calls[0]["url"] == "http://node/v1/query/height"

    bad = HTTPAdapter("http://node", session=FakeSession(FakeHTTPResponse(500, "boom", "Server Error")))
    with pytest.raises(TransportPermanentError):
        bad.query_height()


def test_http_query_node_and_directory():
    node = {"address": "ab" * 20, "public_key": "cd" * 32, "service_url": "https://node", "chains": ["0021"], "jailed": False}
    session = FakeSession(FakeHTTPResponse(200, json.dumps(node)))
    directory = NodeDirectory(HTTPAdapter("http://node", session=session))

    found = directory.lookup_service_node("ab" * 20)
    assert found.public_key == "cd" * 32
    assert found.chains == ["0021"]
    assert json.loads(session.calls[0]["data"]) == {"address": "ab" * 20}

    missing = NodeDirectory(HTTPAdapter("http://node", session=FakeSession(FakeHTTPResponse(404, "{}"))))
    assert missing.lookup_service_node("ef" * 20) is None
