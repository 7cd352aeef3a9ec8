"""Budget evaluator: usage figures, uniqueness and month-to-month copy."""
import pytest

from conftest import API, find_category


async def create_budget(client, headers, **fields):
    payload = {"amount": 50000, "month": 1, "year": 2024}
    payload.update(fields)
    response = await client.post(f"{API}/budgets", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


async def spend(client, headers, amount, on="2024-01-15", **fields):
    payload = {"transaction_type": "expense", "amount": amount, "date": on}
    payload.update(fields)
    response = await client.post(f"{API}/transactions", json=payload, headers=headers)
    assert response.status_code == 201, response.text


class TestBudgetUsage:

    async def test_whole_month_budget(self, client, headers):
        wallet = (await client.post(
            f"{API}/wallets", json={"name": "Bank", "wallet_type": "bank", "balance": 100000}, headers=headers
        )).json()["data"]
        await spend(client, headers, 25000, wallet_id=wallet["id"])

        budget = await create_budget(client, headers, amount=50000, month=1, year=2024)
        assert budget["category_id"] is None
        assert budget["used_amount"] == 25000
        assert budget["remaining_amount"] == 25000
        assert budget["usage_percentage"] == 50.0
        assert budget["is_over_budget"] is False
        assert budget["should_alert"] is False

        balance = (await client.get(f"{API}/wallets/{wallet['id']}", headers=headers)).json()["data"]["balance"]
        assert balance == 75000

    async def test_category_budget_only_counts_its_category(self, client, headers):
        food = await find_category(client, headers, "Food")
        transport = await find_category(client, headers, "Transport")
        await spend(client, headers, 90, category_id=food["id"])
        await spend(client, headers, 500, category_id=transport["id"])

        budget = await create_budget(client, headers, category_id=food["id"], amount=100)
        assert budget["category_name"] == "Food"
        assert budget["used_amount"] == 90
        assert budget["should_alert"] is True

    async def test_income_and_other_months_are_ignored(self, client, headers):
        await spend(client, headers, 10, on="2023-12-31")
        await spend(client, headers, 10, on="2024-02-01")
        await client.post(
            f"{API}/transactions",
            json={"transaction_type": "income", "amount": 999, "date": "2024-01-10"},
            headers=headers,
        )
        budget = await create_budget(client, headers, amount=100)
        assert budget["used_amount"] == 0
        assert budget["usage_percentage"] == 0

    async def test_over_budget(self, client, headers):
        await spend(client, headers, 150)
        budget = await create_budget(client, headers, amount=100)
        assert budget["is_over_budget"] is True
        assert budget["remaining_amount"] == -50

    async def test_threshold_defaults_to_eighty(self, client, headers):
        budget = await create_budget(client, headers)
        assert budget["alert_threshold"] == 80
        assert budget["is_active"] is True

    async def test_list_filters_by_period(self, client, headers):
        await create_budget(client, headers, month=1, year=2024)
        await create_budget(client, headers, month=2, year=2024)
        await create_budget(client, headers, month=1, year=2025)

        response = await client.get(f"{API}/budgets", params={"month": 1}, headers=headers)
        assert len(response.json()["data"]) == 2
        response = await client.get(f"{API}/budgets", params={"month": 1, "year": 2024}, headers=headers)
        assert len(response.json()["data"]) == 1


class TestBudgetValidation:

    @pytest.mark.parametrize(
        "fields, message",
        [
            ({"amount": 0}, "Amount must be greater than 0 and a valid number"),
            ({"amount": 1_000_000_000_000}, "Amount must not exceed 999999999999.99"),
            ({"amount": 1e30}, "Amount must not exceed 999999999999.99"),
            ({"month": 13}, "Month must be between 1 and 12"),
            ({"year": 1999}, "Year must be between 2000 and 3000"),
            ({"alert_threshold": 101}, "Alert threshold must be between 0 and 100"),
        ],
    )
    async def test_invalid_values(self, client, headers, fields, message):
        payload = {"amount": 100, "month": 1, "year": 2024}
        payload.update(fields)
        response = await client.post(f"{API}/budgets", json=payload, headers=headers)
        assert response.status_code == 400
        assert response.json()["error"] == message

    async def test_duplicate_period_is_rejected(self, client, headers):
        await create_budget(client, headers)
        response = await client.post(
            f"{API}/budgets", json={"amount": 10, "month": 1, "year": 2024, "category_id": ""}, headers=headers
        )
        assert response.status_code == 400
        assert response.json()["error"] == "A budget for this category and period already exists"

    async def test_duplicate_that_slips_past_the_check_is_still_rejected(self, client, headers, monkeypatch):
        # Two concurrent creates both pass the lookup; the unique index decides
        await create_budget(client, headers)

        async def nothing_there(*args, **kwargs):
            return False

        monkeypatch.setattr("fintrack.crud.budget.budget_exists", nothing_there)
        response = await client.post(f"{API}/budgets", json={"amount": 10, "month": 1, "year": 2024}, headers=headers)
        assert response.status_code == 400
        assert response.json()["error"] == "A budget for this category and period already exists"

        listed = (await client.get(f"{API}/budgets?month=1&year=2024", headers=headers)).json()["data"]
        assert len(listed) == 1

    async def test_same_period_different_category_is_fine(self, client, headers):
        food = await find_category(client, headers, "Food")
        await create_budget(client, headers)
        await create_budget(client, headers, category_id=food["id"])

    async def test_unknown_category(self, client, headers):
        response = await client.post(
            f"{API}/budgets",
            json={"amount": 10, "month": 1, "year": 2024, "category_id": "00000000-0000-0000-0000-000000000000"},
            headers=headers,
        )
        assert response.status_code == 404


class TestBudgetUpdateDelete:

    async def test_update_amount_recomputes_usage(self, client, headers):
        await spend(client, headers, 50)
        budget = await create_budget(client, headers, amount=100)

        response = await client.put(f"{API}/budgets/{budget['id']}", json={"amount": 200}, headers=headers)
        updated = response.json()["data"]
        assert updated["amount"] == 200
        assert updated["usage_percentage"] == 25.0

    async def test_update_into_taken_period(self, client, headers):
        await create_budget(client, headers, month=1)
        february = await create_budget(client, headers, month=2)

        response = await client.put(f"{API}/budgets/{february['id']}", json={"month": 1}, headers=headers)
        assert response.status_code == 400

    async def test_update_same_period_is_allowed(self, client, headers):
        budget = await create_budget(client, headers)
        response = await client.put(
            f"{API}/budgets/{budget['id']}", json={"month": 1, "year": 2024, "is_active": False}, headers=headers
        )
        assert response.status_code == 200
        assert response.json()["data"]["is_active"] is False

    async def test_invalid_update_value(self, client, headers):
        budget = await create_budget(client, headers)
        response = await client.put(f"{API}/budgets/{budget['id']}", json={"month": 0}, headers=headers)
        assert response.status_code == 400

    async def test_soft_delete_frees_the_period(self, client, headers):
        budget = await create_budget(client, headers)
        assert (await client.delete(f"{API}/budgets/{budget['id']}", headers=headers)).status_code == 200
        assert (await client.delete(f"{API}/budgets/{budget['id']}", headers=headers)).status_code == 404
        assert (await client.get(f"{API}/budgets/{budget['id']}", headers=headers)).status_code == 404

        await create_budget(client, headers)


class TestBudgetCopy:

    async def test_copy_into_empty_month(self, client, headers):
        food = await find_category(client, headers, "Food")
        await create_budget(client, headers, amount=500)
        await create_budget(client, headers, category_id=food["id"], amount=100, alert_threshold=50)

        response = await client.post(
            f"{API}/budgets/copy",
            json={"source_month": 1, "source_year": 2024, "target_month": 2, "target_year": 2024},
            headers=headers,
        )
        assert response.status_code == 201
        copies = response.json()["data"]
        assert len(copies) == 2
        assert all(b["month"] == 2 and b["year"] == 2024 for b in copies)
        assert all(b["used_amount"] == 0 for b in copies)
        assert {b["alert_threshold"] for b in copies} == {80, 50}

    async def test_copy_into_populated_month_writes_nothing(self, client, headers):
        await create_budget(client, headers, month=1)
        food = await find_category(client, headers, "Food")
        await create_budget(client, headers, month=1, category_id=food["id"])
        await create_budget(client, headers, month=2, amount=1)

        response = await client.post(
            f"{API}/budgets/copy",
            json={"source_month": 1, "source_year": 2024, "target_month": 2, "target_year": 2024},
            headers=headers,
        )
        assert response.status_code == 400
        february = (await client.get(f"{API}/budgets", params={"month": 2, "year": 2024}, headers=headers)).json()
        assert len(february["data"]) == 1

    async def test_copy_from_empty_month(self, client, headers):
        response = await client.post(
            f"{API}/budgets/copy",
            json={"source_month": 5, "source_year": 2024, "target_month": 6, "target_year": 2024},
            headers=headers,
        )
        assert response.status_code == 404

    async def test_copy_validates_all_values(self, client, headers):
        response = await client.post(
            f"{API}/budgets/copy",
            json={"source_month": 1, "source_year": 2024, "target_month": 13, "target_year": 2024},
            headers=headers,
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Target month must be between 1 and 12"
