from __future__ import annotations

import httpx
import pytest

from jupiter_relay.adapters.api import (
    API_KEY_HEADER,
    CredentialProvider,
    HttpxExecutor,
    JupiterAdapter,
    StaticCredentialStore,
)
from jupiter_relay.adapters.base import (
    BatchAbortedError,
    ConfigurationError,
    HttpError,
    UnknownOperationError,
)
from jupiter_relay.core.catalog import FAMILIES, HttpMethod


def _adapter(family: str, executor, api_key: str | None = None, **kwargs) -> JupiterAdapter:
    store = StaticCredentialStore({"apiKey": api_key}) if api_key else None
    return JupiterAdapter.for_family(family, executor=executor, credentials=CredentialProvider(store), **kwargs)


def test_quote_with_explicit_zero_slippage(recording_executor):
    adapter = _adapter("swap", recording_executor)

    results = adapter.run(
        [{}],
        {"operation": "quote", "inputMint": "A", "outputMint": "B", "amount": "1000000", "slippageBps": 0},
    )

    request = recording_executor.requests[0]
    assert request.method is HttpMethod.GET
    assert request.url == "https://lite-api.jup.ag/swap/v1/quote"
    assert "slippageBps" not in request.query
    assert {key: request.query[key] for key in ("inputMint", "outputMint", "amount")} == {
        "inputMint": "A",
        "outputMint": "B",
        "amount": "1000000",
    }
    assert request.body == {}
    assert results[0].as_dict() == {"index": 0, "json": {"ok": True, "url": request.url}}


def test_unset_slippage_uses_catalog_default(recording_executor):
    adapter = _adapter("swap", recording_executor)

    adapter.run([{}], {"inputMint": "A", "outputMint": "B", "amount": "1"})

    assert recording_executor.requests[0].query["slippageBps"] == 50


def test_api_key_is_attached_to_every_request(recording_executor):
    adapter = _adapter("price", recording_executor, api_key="k-123")

    adapter.run([{}, {}, {}], {"ids": "So111,EPjF"})

    assert len(recording_executor.requests) == 3
    assert all(request.headers == {API_KEY_HEADER: "k-123"} for request in recording_executor.requests)


def test_missing_api_key_sends_no_header(recording_executor):
    adapter = _adapter("price", recording_executor)

    adapter.run([{}], {"ids": "So111"})

    assert API_KEY_HEADER not in recording_executor.requests[0].headers


def test_credential_is_looked_up_once_per_run(recording_executor):
    class CountingStore:
        calls = 0

        def fetch(self):
            CountingStore.calls += 1
            return {"apiKey": "k"}

    adapter = JupiterAdapter.for_family(
        "price",
        executor=recording_executor,
        credentials=CredentialProvider(CountingStore()),
    )

    adapter.run([{}, {}], {"ids": "So111"})

    assert CountingStore.calls == 1


def test_mutating_operation_posts_declared_parameters(recording_executor):
    adapter = _adapter("trigger", recording_executor)

    adapter.run(
        [{}],
        {
            "operation": "createOrder",
            "inputMint": "A",
            "outputMint": "B",
            "amount": "10",
            "maker": "wallet",
            "triggerPrice": "1.5",
            "account": "ignored-for-create",
        },
    )

    request = recording_executor.requests[0]
    assert request.method is HttpMethod.POST
    assert request.url == "https://lite-api.jup.ag/trigger/v1/createOrder"
    assert dict(request.body) == {
        "inputMint": "A",
        "outputMint": "B",
        "amount": "10",
        "maker": "wallet",
        "triggerPrice": "1.5",
        "triggerCondition": "above",
        "slippageBps": 50,
    }
    assert request.query == {}


def test_per_record_values_follow_index(recording_executor):
    mints = ["mint-a", "mint-b"]
    adapter = _adapter("token", recording_executor)

    adapter.run(mints, {"operation": "getToken", "mintAddress": lambda index: mints[index]})

    assert [request.url for request in recording_executor.requests] == [
        "https://lite-api.jup.ag/tokens/v1/token/mint-a",
        "https://lite-api.jup.ag/tokens/v1/token/mint-b",
    ]


def test_isolation_keeps_failed_record_in_output(executor_factory):
    def reply(request):
        if request.query.get("ids") == "bad":
            raise HttpError("HTTP 400 error", status_code=400)
        return {"data": {}}

    ids = ["good", "bad"]
    adapter = _adapter("price", executor_factory(reply))

    results = adapter.run(ids, {"ids": lambda index: ids[index]}, continue_on_fail=True)

    assert [record.as_dict() for record in results] == [
        {"index": 0, "json": {"data": {}}},
        {"index": 1, "json": {"error": "HTTP 400 error"}},
    ]


def test_abort_reports_failing_index(executor_factory):
    def reply(request):
        if request.query.get("ids") == "bad":
            raise HttpError("HTTP 400 error", status_code=400)
        return {"data": {}}

    ids = ["good", "bad", "never"]
    executor = executor_factory(reply)
    adapter = _adapter("price", executor)

    with pytest.raises(BatchAbortedError) as excinfo:
        adapter.run(ids, {"ids": lambda index: ids[index]})

    assert excinfo.value.record_index == 1
    assert len(excinfo.value.results) == 1
    assert len(executor.requests) == 2


def test_configuration_errors_are_isolated_per_record(recording_executor):
    adapter = _adapter("ultra", recording_executor)
    addresses = ["wallet", ""]

    results = adapter.run(addresses, {"address": lambda index: addresses[index]}, continue_on_fail=True)

    assert results[0].ok
    assert not results[1].ok
    assert "address" in results[1].error
    assert len(recording_executor.requests) == 1


def test_unknown_operation_is_reported(recording_executor):
    adapter = _adapter("swap", recording_executor)

    with pytest.raises(UnknownOperationError):
        adapter.call("teleport")


def test_call_returns_payload(recording_executor):
    adapter = _adapter("ultra", recording_executor)

    payload = adapter.call("balances", address="wallet")

    assert payload == {"ok": True, "url": "https://lite-api.jup.ag/ultra/v1/balances/wallet"}


def test_call_raises_underlying_error(recording_executor):
    adapter = _adapter("swap", recording_executor)

    with pytest.raises(ConfigurationError):
        adapter.call("swap", inputMint="A", outputMint="B", amount="1")


def test_plan_builds_without_executing(recording_executor):
    adapter = _adapter("token", recording_executor, api_key="secret")

    plan = adapter.plan([{}, {}], {"operation": "getNewTokens", "limit": 10})

    assert recording_executor.requests == []
    assert [request.url for request in plan] == ["https://lite-api.jup.ag/tokens/v1/new"] * 2
    assert plan[0].query == {"limit": 10}
    assert plan[0].headers == {API_KEY_HEADER: "secret"}


def test_base_url_override(recording_executor):
    adapter = _adapter("swap", recording_executor, base_url="https://api.jup.ag/swap/v1")

    adapter.run([{}], {"operation": "programIdToLabel"})
    adapter.run([{}], {"operation": "programIdToLabel", "baseUrl": "https://mirror.test/swap"})

    assert [request.url for request in recording_executor.requests] == [
        "https://api.jup.ag/swap/v1/program-id-to-label",
        "https://mirror.test/swap/program-id-to-label",
    ]


@pytest.mark.parametrize(
    ("family", "parameters", "expected_url"),
    [
        ("swap", {"operation": "programIdToLabel"}, "https://lite-api.jup.ag/swap/v1/program-id-to-label"),
        ("price", {"ids": "So111"}, "https://lite-api.jup.ag/price/v3/price"),
        ("token", {}, "https://lite-api.jup.ag/tokens/v1/all"),
        ("trigger", {"operation": "getTriggerOrders", "account": "wallet"}, "https://lite-api.jup.ag/trigger/v1/getTriggerOrders"),
        ("recurring", {"operation": "getRecurringOrders", "account": "wallet"}, "https://lite-api.jup.ag/recurring/v1/getRecurringOrders"),
        ("ultra", {"operation": "routers"}, "https://lite-api.jup.ag/ultra/v1/order/routers"),
    ],
)
def test_every_family_dispatches_through_one_adapter(recording_executor, family, parameters, expected_url):
    assert family in FAMILIES
    adapter = _adapter(family, recording_executor)

    adapter.run([{}], parameters)

    assert recording_executor.requests[0].url == expected_url


def test_malformed_base_url_is_isolated_per_record():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"ok": True}))
    adapter = _adapter("swap", HttpxExecutor(timeout=1.0, transport=transport))
    base_urls = ["https://ok.test/swap", "https://[::1/swap"]

    results = adapter.run(
        [{}, {}],
        {"operation": "programIdToLabel", "baseUrl": lambda index: base_urls[index]},
        continue_on_fail=True,
    )

    assert [record.index for record in results] == [0, 1]
    assert results[0].payload == {"ok": True}
    assert not results[1].ok
    assert "https://[::1/swap" in results[1].error
