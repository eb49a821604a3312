# tests/test_providers.py
"""
Provider Tests - Unit Tests for Balance Accessors

Files that USE this module:
- pytest (test runner executes these tests)

Files that this module USES:
- chainprobe.adapters.providers (HttpClient, RestAccessor, JsonRpcAccessor)
- unittest.mock (mocks the requests session so no network is used)
"""
from unittest.mock import Mock  # Mocking utilities for testing

import pytest  # Testing framework for writing and running tests
import requests  # HTTP library (exceptions are raised by the mocked session)

from chainprobe.adapters.providers.base import HttpClient
from chainprobe.adapters.providers.jsonrpc import JsonRpcAccessor, build_payload, substitute_address
from chainprobe.adapters.providers.rest import RestAccessor, build_url
from chainprobe.domain.errors import MalformedResponseError, NetworkError, RateLimitedError
from chainprobe.domain.models import AccessMethod, ProviderDescriptor


def _response(status_code=200, json_data=None, text="", json_error=False):
    resp = Mock()
    resp.status_code = status_code
    resp.text = text
    if json_error:
        resp.json.side_effect = ValueError("Expecting value")
    else:
        resp.json.return_value = json_data
    return resp


def _client(response=None, error=None):
    session = Mock()
    if error is not None:
        session.request.side_effect = error
    else:
        session.request.return_value = response
    return HttpClient(session=session, timeout=5), session


ETHERSCAN = ProviderDescriptor(
    name="etherscan",
    url_template="https://api.etherscan.io/v2/api?chainid=1&module=account&action=balance&address={address}&tag=latest",
    api_key="ABCDEFGH1234",
    response_path="result",
)


class TestHttpClient:
    def test_success_returns_response(self):
        resp = _response(200, {"ok": True})
        client, session = _client(resp)

        assert client.send("GET", "https://x.example") is resp
        kwargs = session.request.call_args.kwargs
        assert kwargs["timeout"] == 5
        assert kwargs["headers"]["User-Agent"].startswith("chainprobe/")

    def test_429_is_rate_limited(self):
        client, _ = _client(_response(429))
        with pytest.raises(RateLimitedError) as exc:
            client.send("GET", "https://x.example")
        assert exc.value.status_code == 429

    def test_non_2xx_is_network_error(self):
        client, _ = _client(_response(503))
        with pytest.raises(NetworkError) as exc:
            client.send("GET", "https://x.example")
        assert exc.value.status_code == 503
        assert not isinstance(exc.value, RateLimitedError)

    def test_timeout(self):
        client, _ = _client(error=requests.exceptions.Timeout("slow"))
        with pytest.raises(NetworkError, match="timeout after 5s"):
            client.send("GET", "https://x.example")

    def test_connection_error(self):
        client, _ = _client(error=requests.exceptions.ConnectionError("refused"))
        with pytest.raises(NetworkError, match="request failed"):
            client.send("GET", "https://x.example")

    def test_decode_invalid_json(self):
        with pytest.raises(MalformedResponseError):
            HttpClient.decode(_response(200, json_error=True))

    def test_decode_text(self):
        assert HttpClient.decode(_response(200, text="1234"), is_text=True) == "1234"


class TestRestAccessor:
    def test_build_url_appends_key_with_ampersand(self):
        url = build_url(ETHERSCAN, "0xabc")
        assert "address=0xabc&tag=latest" in url
        assert url.endswith("&apikey=ABCDEFGH1234")

    def test_build_url_appends_key_with_question_mark(self):
        provider = ProviderDescriptor(
            name="blockcypher",
            url_template="https://api.blockcypher.com/v1/btc/main/addrs/{address}/balance",
            api_key="tok12345678",
            api_key_param="token",
        )
        assert build_url(provider, "1abc") == "https://api.blockcypher.com/v1/btc/main/addrs/1abc/balance?token=tok12345678"

    def test_build_url_without_key(self):
        provider = ProviderDescriptor(name="mempool", url_template="https://mempool.space/api/address/{address}")
        assert build_url(provider, "bc1q/..") == "https://mempool.space/api/address/bc1q%2F.."

    def test_header_key_not_in_url(self):
        provider = ProviderDescriptor(
            name="hdr", url_template="https://x.example/{address}", api_key="KEY12345678", api_key_header="X-API-Key",
        )
        assert build_url(provider, "a") == "https://x.example/a"

    def test_fetch_json(self):
        client, session = _client(_response(200, {"status": "1", "result": "42"}))

        body = RestAccessor(client).fetch(ETHERSCAN, "0xabc")

        assert body == {"status": "1", "result": "42"}
        args = session.request.call_args
        assert args.args[0] == "GET"
        assert args.kwargs["headers"]["Accept"] == "application/json"

    def test_fetch_text(self):
        provider = ProviderDescriptor(
            name="blockchain_info", url_template="https://blockchain.info/q/addressbalance/{address}", is_text=True,
        )
        client, session = _client(_response(200, text="5000"))

        assert RestAccessor(client).fetch(provider, "1abc") == "5000"
        assert "Accept" not in session.request.call_args.kwargs["headers"]


class TestJsonRpcAccessor:
    SOLANA = ProviderDescriptor(
        name="solana",
        url_template="https://api.mainnet-beta.solana.com",
        access_method=AccessMethod.JSON_RPC,
        rpc_method="getBalance",
        rpc_params=("{address}",),
        response_path="result.value",
    )

    def test_substitute_address_nested(self):
        params = {"address": "{address}", "opts": ["{address}", 1, None]}
        assert substitute_address(params, "A") == {"address": "A", "opts": ["A", 1, None]}

    def test_build_payload(self):
        payload = build_payload(self.SOLANA, "So1ana")
        assert payload["jsonrpc"] == "2.0"
        assert payload["method"] == "getBalance"
        assert payload["params"] == ["So1ana"]
        assert isinstance(payload["id"], int)

    def test_build_payload_requires_method(self):
        provider = ProviderDescriptor(name="x", url_template="https://x.example", access_method=AccessMethod.JSON_RPC)
        with pytest.raises(ValueError):
            build_payload(provider, "a")

    def test_fetch_posts_and_returns_envelope(self):
        envelope = {"jsonrpc": "2.0", "id": 1, "result": {"context": {"slot": 1}, "value": 5000}}
        client, session = _client(_response(200, envelope))

        assert JsonRpcAccessor(client).fetch(self.SOLANA, "So1ana") == envelope
        args = session.request.call_args
        assert args.args[:2] == ("POST", "https://api.mainnet-beta.solana.com")
        assert args.kwargs["json"]["params"] == ["So1ana"]

    def test_rpc_error_member(self):
        envelope = {"jsonrpc": "2.0", "id": 1, "error": {"code": -32602, "message": "Invalid param"}}
        client, _ = _client(_response(200, envelope))
        with pytest.raises(MalformedResponseError, match="Invalid param"):
            JsonRpcAccessor(client).fetch(self.SOLANA, "bad")

    def test_toncenter_ok_false(self):
        provider = ProviderDescriptor(
            name="toncenter", url_template="https://toncenter.com/api/v2/jsonRPC",
            access_method=AccessMethod.JSON_RPC, rpc_method="getAddressBalance",
            rpc_params={"address": "{address}"}, api_key="KEY12345678", api_key_header="X-API-Key",
        )
        client, session = _client(_response(200, {"ok": False, "error": "bad address"}))
        with pytest.raises(MalformedResponseError, match="bad address"):
            JsonRpcAccessor(client).fetch(provider, "EQ")
        assert session.request.call_args.kwargs["headers"]["X-API-Key"] == "KEY12345678"

    def test_non_object_envelope(self):
        client, _ = _client(_response(200, [1, 2]))
        with pytest.raises(MalformedResponseError):
            JsonRpcAccessor(client).fetch(self.SOLANA, "So1ana")
