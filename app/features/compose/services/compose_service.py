import json

from fastapi.concurrency import run_in_threadpool
from openai import OpenAI, OpenAIError
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.compose.models.compose_response import ComposeResponse
from app.features.compose.schemas.compose import ComposeRequest
from app.platform.config import settings
from app.platform.logger import get_logger

logger = get_logger("compose_service")


class ComposeError(Exception):
    """The generative model could not produce a message."""


def build_prompt(request: ComposeRequest) -> str:
    details = json.dumps(request.details or {}, indent=2)
    return f"""
You are an expert {request.channel} message copywriter.

Write the message in: {request.language or "English"}
Industry: {request.industry}
Tone style: {request.tone}
Primary goal: {request.goal}

Context details (optional, use only if helpful):
{details}

Your task:
- Write a highly effective, human-sounding {request.channel} message.
- Keep it concise (3-4 lines maximum).
- Make it clear, engaging, and goal-driven.
- Maintain the selected tone throughout.
- Do NOT repeat the metadata (industry, tone, goal, etc.) in the output.
- Provide only the final message, no explanation.
"""


class ComposeService:
    def __init__(self, db: AsyncSession, client: OpenAI | None = None):
        self.db = db
        self.client = client
        self.model = settings.GEMINI_MODEL

    def _get_client(self) -> OpenAI:
        if self.client is None:
            if not settings.GOOGLE_GEMINI_API_KEY:
                raise ComposeError("GOOGLE_GEMINI_API_KEY is not configured")
            self.client = OpenAI(
                api_key=settings.GOOGLE_GEMINI_API_KEY,
                base_url=settings.GEMINI_BASE_URL,
            )
        return self.client

    def _call_llm(self, prompt: str) -> str:
        try:
            response = self._get_client().chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
            )
        except OpenAIError as e:
            raise ComposeError(str(e)) from e

        if not response.choices:
            raise ComposeError("Model returned no choices")

        text = (response.choices[0].message.content or "").strip()
        if not text:
            raise ComposeError("Model returned an empty message")
        return text

    async def compose(self, request: ComposeRequest) -> str:
        prompt = build_prompt(request)
        ai_text = await run_in_threadpool(self._call_llm, prompt)

        self.db.add(ComposeResponse(channel=request.channel, prompt=prompt, ai_text=ai_text))
        await self.db.commit()

        logger.info(f"Composed {request.channel} message ({len(ai_text)} chars)")
        return ai_text
