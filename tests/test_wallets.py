"""Wallet ledger: defaults, partial updates and soft delete."""
import asyncio
import uuid

import pytest
from sqlalchemy.exc import IntegrityError

from conftest import API, default_wallet, register
from fintrack.core.config import Settings
from fintrack.models.wallet import Wallet


async def create_wallet(client, headers, **fields):
    payload = {"name": "Bank", "wallet_type": "bank"}
    payload.update(fields)
    response = await client.post(f"{API}/wallets", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


def default_count(wallets):
    return sum(1 for w in wallets if w["is_default"])


class TestWalletCreate:

    async def test_first_wallet_is_forced_to_cash_default(self, client, headers):
        # Remove the wallet provisioned at registration
        cash = await default_wallet(client, headers)
        await client.delete(f"{API}/wallets/{cash['id']}", headers=headers)

        response = await client.post(
            f"{API}/wallets", json={"name": "Savings", "wallet_type": "bank", "is_default": False}, headers=headers
        )
        wallet = response.json()["data"]
        assert wallet["wallet_type"] == "cash"
        assert wallet["is_default"] is True

    async def test_opening_balance_defaults_to_zero(self, client, headers):
        wallet = await create_wallet(client, headers)
        assert wallet["balance"] == 0
        assert wallet["is_default"] is False

    async def test_new_default_clears_previous_default(self, client, headers):
        await create_wallet(client, headers, name="Main bank", is_default=True)
        await create_wallet(client, headers, name="E-wallet", wallet_type="e-wallet", is_default=True)

        wallets = (await client.get(f"{API}/wallets", headers=headers)).json()["data"]
        assert default_count(wallets) == 1
        assert wallets[0]["name"] == "E-wallet"

    async def test_credit_wallet_keeps_limit(self, client, headers):
        wallet = await create_wallet(client, headers, name="Visa", wallet_type="credit", credit_limit=5000000)
        assert wallet["credit_limit"] == 5000000

    async def test_unknown_wallet_type_is_rejected(self, client, headers):
        response = await client.post(f"{API}/wallets", json={"name": "X", "wallet_type": "crypto"}, headers=headers)
        assert response.status_code == 400

    @pytest.mark.parametrize(
        "fields",
        [
            {"balance": 1e30},
            {"balance": -1e30},
            {"balance": 1_000_000_000_000},
            {"credit_limit": 1e30},
            {"credit_limit": -1},
        ],
    )
    async def test_out_of_range_money_is_rejected(self, client, headers, fields):
        payload = {"name": "Huge", "wallet_type": "credit"}
        payload.update(fields)
        response = await client.post(f"{API}/wallets", json=payload, headers=headers)
        assert response.status_code == 400
        assert response.json()["success"] is False

    async def test_non_finite_balance_is_rejected(self, client, headers):
        # json.dumps would refuse to write Infinity, so send the raw body
        response = await client.post(
            f"{API}/wallets",
            content=b'{"name": "Inf", "wallet_type": "bank", "balance": Infinity}',
            headers={**headers, "Content-Type": "application/json"},
        )
        assert response.status_code == 400
        names = [w["name"] for w in (await client.get(f"{API}/wallets", headers=headers)).json()["data"]]
        assert "Inf" not in names


class TestWalletList:

    async def test_default_first_then_newest(self, client, headers):
        await create_wallet(client, headers, name="Older")
        await create_wallet(client, headers, name="Newer")

        names = [w["name"] for w in (await client.get(f"{API}/wallets", headers=headers)).json()["data"]]
        assert names[0] == "Cash"
        assert names.index("Newer") < names.index("Older")

    async def test_wallets_are_private(self, client, headers):
        other = await register(client)
        other_headers = {"Authorization": f"Bearer {other['token']}"}
        mine = await create_wallet(client, headers, name="Mine")

        response = await client.get(f"{API}/wallets/{mine['id']}", headers=other_headers)
        assert response.status_code == 404
        assert response.json()["error"] == "Wallet not found"


class TestWalletUpdate:

    async def test_partial_update_with_empty_strings(self, client, headers):
        wallet = await create_wallet(client, headers, name="Bank", icon="🏦")
        response = await client.put(
            f"{API}/wallets/{wallet['id']}",
            json={"name": "", "wallet_type": "", "color": "#000000"},
            headers=headers,
        )
        updated = response.json()["data"]
        assert updated["name"] == "Bank"
        assert updated["wallet_type"] == "bank"
        assert updated["icon"] == "🏦"
        assert updated["color"] == "#000000"

    async def test_set_default_via_update(self, client, headers):
        wallet = await create_wallet(client, headers)
        await client.put(f"{API}/wallets/{wallet['id']}", json={"is_default": True}, headers=headers)

        wallets = (await client.get(f"{API}/wallets", headers=headers)).json()["data"]
        assert default_count(wallets) == 1
        assert next(w for w in wallets if w["is_default"])["id"] == wallet["id"]

    async def test_balance_is_not_patchable(self, client, headers):
        wallet = await create_wallet(client, headers)
        await client.put(f"{API}/wallets/{wallet['id']}", json={"balance": 999}, headers=headers)

        fetched = (await client.get(f"{API}/wallets/{wallet['id']}", headers=headers)).json()["data"]
        assert fetched["balance"] == 0

    async def test_out_of_range_credit_limit_is_rejected(self, client, headers):
        wallet = await create_wallet(client, headers, wallet_type="credit", credit_limit=100)
        response = await client.put(f"{API}/wallets/{wallet['id']}", json={"credit_limit": 1e30}, headers=headers)
        assert response.status_code == 400

        fetched = (await client.get(f"{API}/wallets/{wallet['id']}", headers=headers)).json()["data"]
        assert fetched["credit_limit"] == 100


class TestWalletDelete:

    async def test_soft_delete_reports_transaction_count(self, client, headers):
        wallet = await create_wallet(client, headers)
        for amount in (10, 20):
            await client.post(
                f"{API}/transactions",
                json={"wallet_id": wallet["id"], "transaction_type": "income", "amount": amount},
                headers=headers,
            )

        response = await client.delete(f"{API}/wallets/{wallet['id']}", headers=headers)
        assert response.status_code == 200
        assert response.json()["data"]["transaction_count"] == 2

        # Gone from the ledger, history kept
        assert (await client.get(f"{API}/wallets/{wallet['id']}", headers=headers)).status_code == 404
        transactions = (await client.get(f"{API}/transactions", headers=headers)).json()
        assert transactions["meta"]["total"] == 2

    async def test_repeat_delete_is_not_found(self, client, headers):
        wallet = await create_wallet(client, headers)
        await client.delete(f"{API}/wallets/{wallet['id']}", headers=headers)
        response = await client.delete(f"{API}/wallets/{wallet['id']}", headers=headers)
        assert response.status_code == 404

    async def test_invalid_id_is_bad_request(self, client, headers):
        response = await client.get(f"{API}/wallets/not-a-uuid", headers=headers)
        assert response.status_code == 400


class TestSingleDefaultStorage:
    """The database refuses a second live default, whatever the code path"""

    async def test_second_live_default_is_refused(self, auth, session_factory):
        _, body = auth
        user_id = uuid.UUID(body["user"]["id"])

        async with session_factory() as session:
            session.add(Wallet(user_id=user_id, name="Rogue", wallet_type="bank", balance=0, is_default=True))
            with pytest.raises(IntegrityError):
                await session.commit()
            await session.rollback()

    async def test_deleted_default_does_not_count(self, client, auth, session_factory):
        headers, body = auth
        cash = await default_wallet(client, headers)
        await client.delete(f"{API}/wallets/{cash['id']}", headers=headers)

        async with session_factory() as session:
            session.add(
                Wallet(user_id=uuid.UUID(body["user"]["id"]), name="Next", wallet_type="bank", balance=0, is_default=True)
            )
            await session.commit()


class TestConcurrentDefaults:
    """Parallel default switches for one user leave exactly one default.

    Runs on a file database so each request gets its own connection.
    """

    @pytest.fixture
    def settings(self, tmp_path):
        return Settings(
            _env_file=None,
            DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'wallets.db'}",
            SECRET_KEY="test-secret-key-that-is-long-enough-for-hs256",
            AUTO_CREATE_TABLES=True,
            ENVIRONMENT="test",
        )

    async def test_parallel_creates(self, client, headers):
        responses = await asyncio.gather(*(
            client.post(
                f"{API}/wallets", json={"name": f"Bank {i}", "wallet_type": "bank", "is_default": True}, headers=headers
            )
            for i in range(4)
        ))

        assert {r.status_code for r in responses} <= {201, 409}
        wallets = (await client.get(f"{API}/wallets", headers=headers)).json()["data"]
        assert default_count(wallets) == 1

    async def test_parallel_updates(self, client, headers):
        wallets = [await create_wallet(client, headers, name=f"Bank {i}") for i in range(4)]

        responses = await asyncio.gather(*(
            client.put(f"{API}/wallets/{w['id']}", json={"is_default": True}, headers=headers)
            for w in wallets
        ))

        assert {r.status_code for r in responses} <= {200, 409}
        wallets = (await client.get(f"{API}/wallets", headers=headers)).json()["data"]
        assert default_count(wallets) == 1
