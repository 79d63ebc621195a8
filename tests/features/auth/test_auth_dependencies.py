from datetime import timedelta

from app.features.auth.utils.security import create_access_token


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


def test_admin_token_grants_access(client, admin_user):
    token = create_access_token({"sub": admin_user.id, "email": admin_user.email, "is_admin": True})

    response = client.get("/api/admin/leads", headers=bearer(token))

    assert response.status_code == 200


def test_non_admin_token_is_forbidden(client, subscriber):
    token = create_access_token({"sub": subscriber.id, "email": subscriber.email})

    response = client.get("/api/admin/leads", headers=bearer(token))

    assert response.status_code == 403
    assert response.json()["message"] == "Admin privileges required"


def test_admin_claim_without_admin_account_is_forbidden(client, subscriber):
    token = create_access_token({"sub": subscriber.id, "is_admin": True})

    response = client.get("/api/admin/leads", headers=bearer(token))

    assert response.status_code == 403


def test_expired_token_is_rejected(client, admin_user):
    token = create_access_token({"sub": admin_user.id, "is_admin": True}, expires_delta=timedelta(minutes=-5))

    response = client.get("/api/admin/leads", headers=bearer(token))

    assert response.status_code == 401
    assert response.json()["message"] == "Token has expired"


def test_unknown_user_is_rejected(client):
    token = create_access_token({"sub": "ghost", "is_admin": True})

    response = client.get("/api/admin/leads", headers=bearer(token))

    assert response.status_code == 401


def test_user_token_reaches_referral_stats(client, subscriber):
    token = create_access_token({"sub": subscriber.id})

    response = client.get("/api/referrals/stats", headers=bearer(token))

    assert response.status_code == 200
    assert response.json()["data"]["referral_code"] == subscriber.referral_code


def test_admin_routes_require_credentials(client):
    assert client.get("/api/admin/leads").status_code in (401, 403)
