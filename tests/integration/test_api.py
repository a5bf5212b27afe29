"""Integration tests for the exchange HTTP API."""

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient
from structlog.testing import capture_logs

from dex.api.endpoints import get_exchange
from dex.api.main import MAX_REQUEST_SIZE, app
from dex.exchange import Exchange
from tests.helpers import ALICE, BOB, E18, OWNER, UNREGISTERED_TOKEN


@pytest.fixture
def exchange() -> Exchange:
    return Exchange(OWNER)


@pytest.fixture
def client(exchange: Exchange) -> Iterator[TestClient]:
    """Test client bound to a fresh exchange."""
    app.dependency_overrides[get_exchange] = lambda: exchange
    yield TestClient(app)
    app.dependency_overrides.clear()


def deploy(client: TestClient, symbol: str) -> str:
    response = client.post("/tokens", json={"symbol": symbol})
    assert response.status_code == 201
    return response.json()["address"]


def fund(client: TestClient, token: str, account: str, amount: int, spender: str) -> None:
    """Mint amount of token to account and approve spender for it."""
    response = client.post(f"/tokens/{token}/mint", json={"to": account, "amount": str(amount)})
    assert response.status_code == 200
    response = client.post(
        f"/tokens/{token}/approve",
        json={"owner": account, "spender": spender, "amount": str(amount)},
    )
    assert response.status_code == 200


@pytest.fixture
def pair(client: TestClient) -> dict:
    """An empty pair created through the API."""
    token_a, token_b = deploy(client, "TKA"), deploy(client, "TKB")
    response = client.post("/pairs", json={"tokenA": token_a, "tokenB": token_b})
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def funded_pair(client: TestClient, pair: dict) -> dict:
    """The pair after ALICE deposits 100 of each token."""
    fund(client, pair["token0"], ALICE, 100 * E18, pair["address"])
    fund(client, pair["token1"], ALICE, 100 * E18, pair["address"])
    response = client.post(
        f"/pairs/{pair['address']}/liquidity",
        json={"sender": ALICE, "amount0": str(100 * E18), "amount1": str(100 * E18)},
    )
    assert response.status_code == 200
    return response.json()["pair"]


class TestService:
    def test_health_check(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_factory(self, client, exchange):
        response = client.get("/factory")

        assert response.status_code == 200
        assert response.json() == {
            "address": exchange.factory.address,
            "owner": OWNER,
            "pairCount": 0,
            "feeBps": 30,
        }

    def test_rejects_oversized_body(self, client):
        response = client.post(
            "/tokens",
            content=b"x" * (MAX_REQUEST_SIZE + 1),
            headers={"content-type": "application/json"},
        )
        assert response.status_code == 413


class TestTokens:
    def test_deploy(self, client):
        response = client.post("/tokens", json={"symbol": "TKA"})

        assert response.status_code == 201
        data = response.json()
        assert data["symbol"] == "TKA"
        assert data["totalSupply"] == "0"
        assert data["address"].startswith("0x")

    def test_mint_and_balance(self, client):
        token = deploy(client, "TKA")

        response = client.post(f"/tokens/{token}/mint", json={"to": ALICE, "amount": "500"})
        assert response.json() == {"account": ALICE, "balance": "500"}

        response = client.get(f"/tokens/{token}/balances/{ALICE}")
        assert response.json() == {"account": ALICE, "balance": "500"}

    def test_unknown_token(self, client):
        response = client.get(f"/tokens/{UNREGISTERED_TOKEN}/balances/{ALICE}")

        assert response.status_code == 404
        assert response.json()["error"] == "unknown_token"

    def test_negative_amount(self, client):
        token = deploy(client, "TKA")
        response = client.post(f"/tokens/{token}/mint", json={"to": ALICE, "amount": "-1"})
        assert response.status_code == 422

    def test_malformed_address(self, client):
        token = deploy(client, "TKA")
        response = client.post(f"/tokens/{token}/mint", json={"to": "0x1234", "amount": "1"})
        assert response.status_code == 422


class TestPairs:
    def test_create(self, client, pair):
        assert pair["token0"] < pair["token1"]
        assert pair["reserve0"] == "0"
        assert pair["totalSupply"] == "0"
        assert pair["state"] == "empty"
        assert client.get("/factory").json()["pairCount"] == 1

    def test_duplicate_in_reverse_order(self, client, pair):
        response = client.post("/pairs", json={"tokenA": pair["token1"], "tokenB": pair["token0"]})

        assert response.status_code == 409
        assert response.json()["error"] == "pair_already_exists"

    def test_identical_tokens(self, client):
        token = deploy(client, "TKA")
        response = client.post("/pairs", json={"tokenA": token, "tokenB": token})

        assert response.status_code == 400
        assert response.json()["error"] == "identical_token_addresses"

    def test_unregistered_token(self, client):
        token = deploy(client, "TKA")
        response = client.post("/pairs", json={"tokenA": token, "tokenB": UNREGISTERED_TOKEN})

        assert response.status_code == 404
        assert response.json()["error"] == "unknown_token"

    def test_lookup_either_order(self, client, pair):
        for token_a, token_b in [(pair["token0"], pair["token1"]), (pair["token1"], pair["token0"])]:
            response = client.get("/pairs/lookup", params={"tokenA": token_a, "tokenB": token_b})
            assert response.status_code == 200
            assert response.json()["address"] == pair["address"]

    def test_lookup_missing(self, client):
        token_a, token_b = deploy(client, "TKA"), deploy(client, "TKB")
        response = client.get("/pairs/lookup", params={"tokenA": token_a, "tokenB": token_b})

        assert response.status_code == 404
        assert response.json()["error"] == "pair_not_found"

    def test_list(self, client, pair):
        response = client.get("/pairs")
        assert [p["address"] for p in response.json()] == [pair["address"]]

    def test_unknown_pair(self, client):
        response = client.get(f"/pairs/{UNREGISTERED_TOKEN}")
        assert response.status_code == 404


class TestLiquidity:
    def test_add(self, client, funded_pair):
        assert funded_pair["reserve0"] == str(100 * E18)
        assert funded_pair["totalSupply"] == str(100 * E18)
        assert funded_pair["state"] == "funded"

        response = client.get(f"/pairs/{funded_pair['address']}/balances/{ALICE}")
        assert response.json()["balance"] == str(100 * E18)

    def test_add_without_approval(self, client, pair):
        response = client.post(
            f"/pairs/{pair['address']}/liquidity",
            json={"sender": BOB, "amount0": "10", "amount1": "10"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "insufficient_allowance"

    def test_remove(self, client, funded_pair):
        response = client.post(
            f"/pairs/{funded_pair['address']}/liquidity/remove",
            json={"sender": ALICE, "liquidity": str(100 * E18)},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["amount0"] == data["amount1"] == str(100 * E18)
        assert data["pair"]["state"] == "empty"

    def test_remove_too_much(self, client, funded_pair):
        response = client.post(
            f"/pairs/{funded_pair['address']}/liquidity/remove",
            json={"sender": BOB, "liquidity": "1"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "insufficient_liquidity"


class TestSwap:
    def test_swap(self, client, funded_pair):
        fund(client, funded_pair["token0"], BOB, 10 * E18, funded_pair["address"])

        response = client.post(
            f"/pairs/{funded_pair['address']}/swap",
            json={"sender": BOB, "amountIn0": str(10 * E18)},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["direction"] == "zero_for_one"
        assert data["amountIn"] == str(10 * E18)
        assert 0 < int(data["amountOut"]) < 10 * E18
        assert data["pair"]["reserve1"] == str(100 * E18 - int(data["amountOut"]))

        balance = client.get(f"/tokens/{funded_pair['token1']}/balances/{BOB}").json()
        assert balance["balance"] == data["amountOut"]

    def test_both_inputs(self, client, funded_pair):
        response = client.post(
            f"/pairs/{funded_pair['address']}/swap",
            json={"sender": BOB, "amountIn0": "10", "amountIn1": "10"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_input_amount"

    def test_no_input(self, client, funded_pair):
        response = client.post(f"/pairs/{funded_pair['address']}/swap", json={"sender": BOB})

        assert response.status_code == 400
        assert response.json()["error"] == "insufficient_input_amount"

    def test_empty_pool(self, client, pair):
        response = client.post(
            f"/pairs/{pair['address']}/swap", json={"sender": BOB, "amountIn1": "10"}
        )

        assert response.status_code == 400
        assert response.json()["error"] == "insufficient_liquidity"

    def test_swap_is_logged_once(self, client, funded_pair):
        fund(client, funded_pair["token1"], BOB, E18, funded_pair["address"])

        with capture_logs() as logs:
            response = client.post(
                f"/pairs/{funded_pair['address']}/swap",
                json={"sender": BOB, "amountIn1": str(E18)},
            )

        swaps = [entry for entry in logs if entry["event"] == "swap_executed"]
        assert len(swaps) == 1
        assert swaps[0]["log_level"] == "info"
        assert swaps[0]["direction"] == response.json()["direction"] == "one_for_zero"
        assert str(swaps[0]["amount_out"]) == response.json()["amountOut"]
