from __future__ import annotations

import pytest

from jupiter_relay.adapters.api.requests import RequestBuilder, RequestDescriptor, split_list
from jupiter_relay.adapters.base import ConfigurationError
from jupiter_relay.core.catalog import HttpMethod, load_catalog

SWAP_BASE = "https://lite-api.jup.ag/swap/v1"


def test_zero_slippage_is_omitted_from_quote_query(swap_catalog):
    builder = RequestBuilder(swap_catalog)

    request = builder.build(
        "quote",
        {"inputMint": "A", "outputMint": "B", "amount": "1000000", "slippageBps": 0},
        SWAP_BASE,
    )

    assert request.method is HttpMethod.GET
    assert request.url == f"{SWAP_BASE}/quote"
    assert dict(request.query) == {"inputMint": "A", "outputMint": "B", "amount": "1000000"}
    assert dict(request.body) == {}


def test_falsy_values_are_never_sent(swap_catalog):
    builder = RequestBuilder(swap_catalog)

    request = builder.build(
        "swap",
        {
            "inputMint": "A",
            "outputMint": "B",
            "amount": "5",
            "userPublicKey": "wallet",
            "wrapAndUnwrapSol": False,
            "feeAccount": "",
            "computeUnitPriceMicroLamports": 0,
            "useSharedAccounts": True,
        },
        SWAP_BASE,
    )

    assert request.method is HttpMethod.POST
    assert dict(request.body) == {
        "inputMint": "A",
        "outputMint": "B",
        "amount": "5",
        "userPublicKey": "wallet",
        "useSharedAccounts": True,
    }
    assert dict(request.query) == {}


def test_list_parameters_become_arrays_in_post_bodies():
    catalog = load_catalog("trigger")
    builder = RequestBuilder(catalog)

    request = builder.build("cancelOrders", {"maker": "wallet", "orderIds": "a, b ,c"}, catalog.base_url)

    assert request.method is HttpMethod.POST
    assert request.url == "https://lite-api.jup.ag/trigger/v1/cancelOrders"
    assert request.body["orderIds"] == ["a", "b", "c"]


def test_list_parameters_stay_raw_in_query(swap_catalog):
    builder = RequestBuilder(swap_catalog)

    request = builder.build(
        "quote",
        {"inputMint": "A", "outputMint": "B", "amount": "1", "dexes": "Orca,Raydium"},
        SWAP_BASE,
    )

    assert request.query["dexes"] == "Orca,Raydium"


def test_path_parameters_are_interpolated_and_not_repeated():
    catalog = load_catalog("token")
    builder = RequestBuilder(catalog)

    request = builder.build("getToken", {"mintAddress": "So11111111111111111111111111111111111111112"}, catalog.base_url)

    assert request.url == "https://lite-api.jup.ag/tokens/v1/token/So11111111111111111111111111111111111111112"
    assert dict(request.query) == {}


def test_path_parameters_are_url_quoted():
    catalog = load_catalog("token")
    builder = RequestBuilder(catalog)

    request = builder.build("getTaggedTokens", {"tagList": "verified,lst/new"}, catalog.base_url)

    assert request.url.endswith("/tagged/verified,lst%2Fnew")


def test_missing_path_parameter_raises():
    catalog = load_catalog("ultra")
    builder = RequestBuilder(catalog)

    with pytest.raises(ConfigurationError, match="address"):
        builder.build("balances", {}, catalog.base_url)


def test_trailing_slash_in_base_url_is_normalised(swap_catalog):
    builder = RequestBuilder(swap_catalog)

    request = builder.build("programIdToLabel", {}, "https://example.test/swap/")

    assert request.url == "https://example.test/swap/program-id-to-label"


def test_descriptor_headers_are_merged_and_redacted():
    request = RequestDescriptor(method=HttpMethod.GET, url="https://example.test", query={"a": "1"})

    authenticated = request.with_headers({"x-api-key": "secret"})

    assert request.headers == {}
    assert authenticated.headers == {"x-api-key": "secret"}
    assert authenticated.as_dict()["headers"] == {"x-api-key": "***"}
    assert authenticated.as_dict(redact_headers=False)["headers"] == {"x-api-key": "secret"}
    assert request.with_headers({}) is request


def test_split_list_trims_tokens():
    assert split_list(" a,b , c") == ["a", "b", "c"]
