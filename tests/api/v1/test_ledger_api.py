import pytest

from tests.helpers import ALICE, BOB, CAROL


async def settle_bob(client, auth_headers):
    bill = (await client.post(
        "/api/v1/bills/",
        json={"title": "Dinner", "total_amount": 120, "paid_by": ALICE, "participants": [ALICE, BOB, CAROL]},
        headers=auth_headers(ALICE),
    )).json()
    base = f"/api/v1/bills/{bill['id']}/payments/{BOB}"
    await client.post(f"{base}/mark-paid", headers=auth_headers(BOB))
    await client.post(f"{base}/confirm", headers=auth_headers(ALICE))
    return bill


@pytest.mark.asyncio
async def test_summary(client, auth_headers):
    await settle_bob(client, auth_headers)

    response = await client.get("/api/v1/ledger/summary", headers=auth_headers(ALICE))

    assert response.status_code == 200
    assert response.json() == {
        "user_id": ALICE,
        "total_owed": 40.0,
        "total_owing": 0.0,
        "total_settled": 40.0,
        "balance": 40.0,
        "bill_count": 1,
    }


@pytest.mark.asyncio
async def test_friend_balances(client, auth_headers):
    await settle_bob(client, auth_headers)

    response = await client.get("/api/v1/ledger/friends", headers=auth_headers(CAROL))

    assert [(f["friend_id"], f["balance"]) for f in response.json()] == [(ALICE, -40.0), (BOB, 0.0)]


@pytest.mark.asyncio
async def test_outstanding(client, auth_headers):
    bill = await settle_bob(client, auth_headers)

    carol = (await client.get(f"/api/v1/ledger/outstanding/{CAROL}", headers=auth_headers(ALICE))).json()
    bob = (await client.get(f"/api/v1/ledger/outstanding/{BOB}", headers=auth_headers(ALICE))).json()

    assert carol["bill_ids"] == [bill["id"]]
    assert carol["total"] == 40.0
    assert carol["can_remind"] is True
    assert bob["bill_ids"] == []
    assert bob["can_remind"] is False


@pytest.mark.asyncio
async def test_split_preview(client, auth_headers):
    response = await client.post(
        "/api/v1/splits/preview",
        json={"total_amount": 100, "split_method": "equal", "participants": ["a", "b", "c"]},
        headers=auth_headers(ALICE),
    )

    data = response.json()
    assert response.status_code == 200
    assert [s["amount"] for s in data["shares"]] == [33.33, 33.33, 33.34]
    assert data["is_valid"] is True


@pytest.mark.asyncio
async def test_split_preview_reports_bad_percentages(client, auth_headers):
    response = await client.post(
        "/api/v1/splits/preview",
        json={
            "total_amount": 100,
            "split_method": "percentage",
            "splits": [{"user_id": "a", "percentage": 50}, {"user_id": "b", "percentage": 40}],
        },
        headers=auth_headers(ALICE),
    )

    data = response.json()
    assert response.status_code == 200
    assert data["is_valid"] is False
    assert data["error"] == "Percentages must total 100%. Current total: 90%"
    assert data["total"] == 90.0
