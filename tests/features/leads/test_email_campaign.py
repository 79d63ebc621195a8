from unittest.mock import patch

import pytest

from app.features.leads.models.lead_model import Lead
from app.features.leads.schemas.email_feedback import SendEmailRequest
from app.features.leads.services.email_campaign import EmailCampaignService
from app.platform.services.email import EmailDeliveryError

SEND_EMAIL = "app.features.leads.services.email_campaign.send_email"


@pytest.fixture
def seeded_leads(db_session):
    async def _seed():
        db_session.add_all(
            [
                Lead(lead_id="1", name="Alice", email="alice@x.com", city="Lagos", category="Dentist", upload_sequence=1),
                Lead(lead_id="2", name="Bob", email="bob@x.com", city="lagos", category="Salon", upload_sequence=2),
                Lead(lead_id="3", name="Carol", email="carol@x.com", city="Accra", category="Dentist", upload_sequence=3),
            ]
        )
        await db_session.commit()

    return _seed


@pytest.mark.asyncio
async def test_city_email_sends_to_matching_leads_and_records_feedback(admin_user, seeded_leads, db_session):
    await seeded_leads()
    request = SendEmailRequest(
        subject="Hello", message="Hi {{ name }} from {{ city }}", email_type="city", city="LAGOS"
    )

    with patch(SEND_EMAIL) as send_email:
        feedback = await EmailCampaignService(db_session).send(admin_user.id, request)

    assert send_email.call_count == 2
    sent_to = {call.args[0] for call in send_email.call_args_list}
    assert sent_to == {"alice@x.com", "bob@x.com"}
    bodies = {call.args[0]: call.args[2] for call in send_email.call_args_list}
    assert bodies["alice@x.com"] == "Hi Alice from Lagos"

    assert feedback.total_recipients == 2
    assert feedback.success_count == 2
    assert feedback.failed_count == 0
    assert feedback.filter_city == "LAGOS"
    assert {r.status.value for r in feedback.recipients} == {"sent"}


@pytest.mark.asyncio
async def test_failed_recipient_is_recorded_and_others_still_sent(admin_user, seeded_leads, db_session):
    await seeded_leads()

    def flaky(to_email, subject, body):
        if to_email == "bob@x.com":
            raise EmailDeliveryError("mailbox unavailable")

    with patch(SEND_EMAIL, side_effect=flaky) as send_email:
        feedback = await EmailCampaignService(db_session).send(
            admin_user.id, SendEmailRequest(subject="Hi", message="Hello", email_type="bulk")
        )

    assert send_email.call_count == 3
    assert feedback.success_count == 2
    assert feedback.failed_count == 1
    failed = [r for r in feedback.recipients if r.status.value == "failed"]
    assert [(r.email, r.error) for r in failed] == [("bob@x.com", "mailbox unavailable")]


def test_send_email_route_selected_leads(admin_client):
    created = [
        admin_client.post(
            "/api/admin/leads", json={"lead_id": str(i), "name": f"Lead {i}", "email": f"l{i}@x.com"}
        ).json()["data"]
        for i in range(3)
    ]

    with patch(SEND_EMAIL) as send_email:
        response = admin_client.post(
            "/api/admin/leads/send-email",
            json={
                "subject": "Offer",
                "message": "Hello {{ name }}",
                "email_type": "selected",
                "lead_ids": [created[0]["id"], created[2]["id"]],
            },
        )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["total_recipients"] == 2
    assert data["email_type"] == "selected"
    assert {r["email"] for r in data["recipients"]} == {"l0@x.com", "l2@x.com"}
    assert send_email.call_count == 2

    history = admin_client.get("/api/admin/email-feedback").json()["data"]
    assert history["pagination"]["total_items"] == 1
    assert history["feedback"][0]["subject"] == "Offer"


def test_send_email_requires_filter_value(admin_client):
    response = admin_client.post(
        "/api/admin/leads/send-email",
        json={"subject": "Offer", "message": "Hi", "email_type": "country"},
    )

    assert response.status_code == 400
    assert "'country' is required" in response.json()["message"]


def test_send_email_with_no_matching_leads(admin_client):
    with patch(SEND_EMAIL) as send_email:
        response = admin_client.post(
            "/api/admin/leads/send-email",
            json={"subject": "Offer", "message": "Hi", "email_type": "bulk"},
        )

    assert response.status_code == 404
    send_email.assert_not_called()
