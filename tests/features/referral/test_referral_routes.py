from datetime import datetime, timedelta, timezone


def test_validate_referral_code(client, subscriber):
    response = client.get("/api/referrals/validate/9f2c41a7b0de")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data == {"valid": True, "referrer": {"name": "Ada Lovelace", "email": "ada@example.com"}}


def test_validate_expired_referral_code_is_invalid_not_error(client, user_factory):
    user_factory(
        email="lapsed@example.com",
        name="Lapsed",
        referral_code="AAAABBBBCCCC",
        subscription_end_date=datetime.now(timezone.utc) - timedelta(days=3),
    )

    response = client.get("/api/referrals/validate/AAAABBBBCCCC")

    assert response.status_code == 404
    payload = response.json()
    assert payload["message"] == "Invalid or expired referral code"
    assert payload["data"]["valid"] is False


def test_my_referrals_lists_entries(auth_client, subscriber, user_factory, add_referral):
    first = user_factory(email="one@example.com", name="One")
    second = user_factory(email="two@example.com", name="Two")
    add_referral(subscriber, first, joined_at=datetime(2026, 1, 1, tzinfo=timezone.utc))
    add_referral(
        subscriber,
        second,
        joined_at=datetime(2026, 2, 1, tzinfo=timezone.utc),
        is_active=True,
        subscription_status="active",
    )

    response = auth_client.get("/api/referrals/my-referrals")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["referral_code"] == "9F2C41A7B0DE"
    assert [item["user"]["email"] for item in data["referrals"]] == ["one@example.com", "two@example.com"]
    assert [item["is_active"] for item in data["referrals"]] == [False, True]
    assert data["referrals"][1]["subscription_status"] == "active"
    assert data["stats"]["total_referrals"] == 0


def test_referral_stats(auth_client):
    response = auth_client.get("/api/referrals/stats")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["referral_code"] == "9F2C41A7B0DE"
    assert data["total_referrals"] == 0
    assert data["active_referrals"] == 0


def test_referral_endpoints_require_authentication(client):
    assert client.get("/api/referrals/my-referrals").status_code in (401, 403)
    assert client.get("/api/referrals/stats").status_code in (401, 403)
