from unittest.mock import MagicMock, patch

import pytest
from openai import OpenAIError
from sqlalchemy import select

from app.features.compose.models.compose_response import ComposeResponse
from app.features.compose.schemas.compose import ComposeRequest
from app.features.compose.services.compose_service import ComposeError, ComposeService, build_prompt

REQUEST = {
    "channel": "whatsapp",
    "industry": "Dental clinics",
    "tone": "Friendly",
    "goal": "Book a demo call",
    "details": {"offer": "Free audit"},
}


def fake_client(text="Hi there! Want a free audit this week?"):
    client = MagicMock()
    message = MagicMock()
    message.content = text
    client.chat.completions.create.return_value = MagicMock(choices=[MagicMock(message=message)])
    return client


def test_build_prompt_includes_request_fields():
    prompt = build_prompt(ComposeRequest(**REQUEST))

    assert "expert whatsapp message copywriter" in prompt
    assert "Write the message in: English" in prompt
    assert "Industry: Dental clinics" in prompt
    assert '"offer": "Free audit"' in prompt


@pytest.mark.asyncio
async def test_compose_stores_generated_text(db_session):
    client = fake_client()

    text = await ComposeService(db_session, client=client).compose(ComposeRequest(**REQUEST))

    assert text == "Hi there! Want a free audit this week?"
    kwargs = client.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == "gemini-2.5-flash"
    stored = (await db_session.execute(select(ComposeResponse))).scalars().all()
    assert [(row.channel, row.ai_text) for row in stored] == [("whatsapp", text)]


@pytest.mark.asyncio
async def test_compose_wraps_client_errors(db_session):
    client = MagicMock()
    client.chat.completions.create.side_effect = OpenAIError("quota exceeded")

    with pytest.raises(ComposeError):
        await ComposeService(db_session, client=client).compose(ComposeRequest(**REQUEST))


@pytest.mark.asyncio
async def test_compose_rejects_empty_output(db_session):
    with pytest.raises(ComposeError):
        await ComposeService(db_session, client=fake_client(text="  ")).compose(ComposeRequest(**REQUEST))


@pytest.mark.asyncio
async def test_compose_treats_missing_choices_as_failure(db_session):
    client = MagicMock()
    client.chat.completions.create.return_value = MagicMock(choices=[])

    with pytest.raises(ComposeError):
        await ComposeService(db_session, client=client).compose(ComposeRequest(**REQUEST))


def test_compose_route_success(client):
    with patch(
        "app.features.compose.services.compose_service.ComposeService._get_client",
        return_value=fake_client("Hello from Gemini"),
    ):
        response = client.post("/api/compose", json=REQUEST)

    assert response.status_code == 200
    assert response.json() == {"ok": True, "text": "Hello from Gemini"}


def test_compose_route_failure_without_api_key(client):
    with patch("app.features.compose.services.compose_service.settings.GOOGLE_GEMINI_API_KEY", None):
        response = client.post("/api/compose", json=REQUEST)

    assert response.status_code == 500
    assert response.json() == {"ok": False, "error": "AI request failed"}
