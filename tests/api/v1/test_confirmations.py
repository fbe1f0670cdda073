"""
API tests for price confirmations.

Tests cover:
- Confirm / un-confirm (POST/DELETE /prices/{price_id}/confirmations)
- Validation threshold and its recomputation in both directions
- Guards: missing price, official price, own report, duplicates
- Batched counts and per-viewer status
"""

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from surtidores.config import DataSource
from surtidores.models import PriceConfirmations


@pytest.mark.api
class TestConfirmPrice:
    async def test_confirm_other_users_price(
        self, client: AsyncClient, auth_headers, user, other_user, station, make_price
    ):
        price = await make_price(station, reporter=user)

        response = await client.post(
            f"/api/v1/prices/{price.price_id}/confirmations", headers=auth_headers(other_user)
        )

        assert response.status_code == 201
        data = response.json()
        assert data == {
            "price_id": price.price_id,
            "confirmed": True,
            "confirmation_count": 1,
            "is_validated": False,
        }

    async def test_requires_authentication(self, client: AsyncClient, user, station, make_price):
        price = await make_price(station, reporter=user)

        response = await client.post(f"/api/v1/prices/{price.price_id}/confirmations")

        assert response.status_code == 401

    async def test_missing_price_is_not_found(self, client: AsyncClient, auth_headers, user):
        response = await client.post("/api/v1/prices/9999/confirmations", headers=auth_headers(user))

        assert response.status_code == 404

    async def test_official_price_cannot_be_confirmed(
        self, client: AsyncClient, auth_headers, user, station, make_price
    ):
        price = await make_price(station, reporter=None, source=DataSource.official)

        response = await client.post(
            f"/api/v1/prices/{price.price_id}/confirmations", headers=auth_headers(user)
        )

        assert response.status_code == 400
        assert "Official" in response.json()["detail"]

    async def test_cannot_confirm_own_report(
        self, client: AsyncClient, auth_headers, user, station, make_price
    ):
        price = await make_price(station, reporter=user)

        response = await client.post(
            f"/api/v1/prices/{price.price_id}/confirmations", headers=auth_headers(user)
        )

        assert response.status_code == 400
        assert "own" in response.json()["detail"]

    async def test_cannot_confirm_own_report_even_when_validated(
        self, client: AsyncClient, auth_headers, make_user, station, make_price
    ):
        reporter = await make_user("Reporter")
        price = await make_price(station, reporter=reporter)
        for _ in range(3):
            confirmer = await make_user()
            response = await client.post(
                f"/api/v1/prices/{price.price_id}/confirmations", headers=auth_headers(confirmer)
            )
            assert response.status_code == 201

        response = await client.post(
            f"/api/v1/prices/{price.price_id}/confirmations", headers=auth_headers(reporter)
        )

        assert response.status_code == 400

    async def test_duplicate_confirmation_conflicts(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        auth_headers,
        user,
        other_user,
        station,
        make_price,
    ):
        price = await make_price(station, reporter=user)
        url = f"/api/v1/prices/{price.price_id}/confirmations"

        first = await client.post(url, headers=auth_headers(other_user))
        second = await client.post(url, headers=auth_headers(other_user))

        assert first.status_code == 201
        assert second.status_code == 409

        count = await db_session.scalar(
            select(func.count())
            .select_from(PriceConfirmations)
            .where(PriceConfirmations.price_id == price.price_id)
        )
        assert count == 1

    async def test_remove_then_confirm_again(
        self, client: AsyncClient, auth_headers, user, other_user, station, make_price
    ):
        price = await make_price(station, reporter=user)
        url = f"/api/v1/prices/{price.price_id}/confirmations"

        assert (await client.post(url, headers=auth_headers(other_user))).status_code == 201
        assert (await client.delete(url, headers=auth_headers(other_user))).status_code == 200
        again = await client.post(url, headers=auth_headers(other_user))

        assert again.status_code == 201
        assert again.json()["confirmation_count"] == 1


@pytest.mark.api
class TestValidationThreshold:
    async def test_third_confirmation_validates_and_removal_invalidates(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        auth_headers,
        make_user,
        station,
        make_price,
    ):
        reporter = await make_user("Reporter")
        confirmers = [await make_user() for _ in range(4)]
        price = await make_price(station, reporter=reporter)
        url = f"/api/v1/prices/{price.price_id}/confirmations"

        results = []
        for confirmer in confirmers:
            response = await client.post(url, headers=auth_headers(confirmer))
            assert response.status_code == 201
            results.append(response.json())

        assert [r["confirmation_count"] for r in results] == [1, 2, 3, 4]
        assert [r["is_validated"] for r in results] == [False, False, True, True]

        # Back down to 2 confirmations
        for confirmer in confirmers[:2]:
            response = await client.delete(url, headers=auth_headers(confirmer))
            assert response.status_code == 200

        data = response.json()
        assert data["confirmed"] is False
        assert data["confirmation_count"] == 2
        assert data["is_validated"] is False

        await db_session.refresh(price)
        assert price.is_validated is False


@pytest.mark.api
class TestRemoveConfirmation:
    async def test_remove_without_confirmation_is_not_found(
        self, client: AsyncClient, auth_headers, user, other_user, station, make_price
    ):
        price = await make_price(station, reporter=user)

        response = await client.delete(
            f"/api/v1/prices/{price.price_id}/confirmations", headers=auth_headers(other_user)
        )

        assert response.status_code == 404

    async def test_remove_on_missing_price_is_not_found(
        self, client: AsyncClient, auth_headers, user
    ):
        response = await client.delete("/api/v1/prices/9999/confirmations", headers=auth_headers(user))

        assert response.status_code == 404


@pytest.mark.api
class TestConfirmationReads:
    async def test_batched_counts_default_to_zero(
        self, client: AsyncClient, auth_headers, user, other_user, station, make_price
    ):
        confirmed = await make_price(station, reporter=user)
        unconfirmed = await make_price(station, reporter=user)
        await client.post(
            f"/api/v1/prices/{confirmed.price_id}/confirmations", headers=auth_headers(other_user)
        )

        response = await client.get(
            "/api/v1/prices/confirmation-counts",
            params={"ids": f"{confirmed.price_id},{unconfirmed.price_id},9999"},
        )

        assert response.status_code == 200
        counts = response.json()["counts"]
        assert counts == {
            str(confirmed.price_id): 1,
            str(unconfirmed.price_id): 0,
            "9999": 0,
        }

    async def test_batched_counts_reject_malformed_ids(self, client: AsyncClient):
        response = await client.get("/api/v1/prices/confirmation-counts", params={"ids": "1,abc"})

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "ids"

    @pytest.mark.parametrize("ids", ["1,\u00b2", "\u0661,2", "1,-3"])
    async def test_batched_counts_reject_non_ascii_digits(self, client: AsyncClient, ids):
        response = await client.get("/api/v1/prices/confirmation-counts", params={"ids": ids})

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "ids"

    async def test_status_for_anonymous_and_viewer(
        self, client: AsyncClient, auth_headers, user, other_user, station, make_price
    ):
        price = await make_price(station, reporter=user)
        await client.post(
            f"/api/v1/prices/{price.price_id}/confirmations", headers=auth_headers(other_user)
        )
        url = f"/api/v1/prices/{price.price_id}/confirmations/status"

        anonymous = await client.get(url)
        viewer = await client.get(url, headers=auth_headers(other_user))
        reporter = await client.get(url, headers=auth_headers(user))

        assert anonymous.json() == {
            "price_id": price.price_id,
            "confirmation_count": 1,
            "confirmed": False,
        }
        assert viewer.json()["confirmed"] is True
        assert reporter.json()["confirmed"] is False

    async def test_list_confirmations_by_user(
        self, client: AsyncClient, auth_headers, user, other_user, station, make_price
    ):
        first = await make_price(station, reporter=user, price="1100.00")
        second = await make_price(station, reporter=user, price="1200.00")
        for price in (first, second):
            await client.post(
                f"/api/v1/prices/{price.price_id}/confirmations", headers=auth_headers(other_user)
            )

        response = await client.get(
            "/api/v1/prices/confirmations", params={"user_id": other_user.user_id}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["has_more"] is False
        assert {item["price_id"] for item in data["items"]} == {first.price_id, second.price_id}
        assert all(item["station_name"] == station.name for item in data["items"])
