"""Timezone onboarding: one bounded model turn with a single tool."""

from typing import Any
from uuid import UUID

import structlog

from core.exceptions import AppException
from domain.entities.inbound import INCOMING_ROLE, RequestContext, WebhookStatus
from domain.services.profile_service import ProfileService
from infrastructure.downstream.client import DownstreamClient
from infrastructure.llm.base import LLM, Tool
from infrastructure.llm.tool_agent import ToolAgent
from infrastructure.telegram.client import TelegramClient

logger = structlog.get_logger()

FALLBACK_MESSAGE = "I need your timezone first. Please send it in UTC format (e.g., 'UTC-5')."

TIMEZONE_SYSTEM_PROMPT = """You are a helpful assistant that helps users set their timezone for accurate time-based features.

Your task: Help the user set their timezone using the setTimezone tool, then ask what you can help with.

Timezone Processing:
1. UTC Format: Accept directly (UTC-5, UTC+1, UTC+5:30)
2. Location/City: Convert to UTC offset
3. Named Zones: Convert abbreviations (EST→UTC-5, PST→UTC-8, CET→UTC+1, JST→UTC+9, etc.)
4. Unclear Input: Ask for clarification with examples

Common Conversions:
- US: EST/EDT(UTC-5/-4), PST/PDT(UTC-8/-7), MST/MDT(UTC-7/-6), CST/CDT(UTC-6/-5)
- Europe: CET/CEST(UTC+1/+2), GMT/BST(UTC+0/+1), EET(UTC+2)
- Asia: JST(UTC+9), CST China(UTC+8), IST(UTC+5:30)
- Australia: AEST(UTC+10), ACST(UTC+9:30), AWST(UTC+8)

Workflow:
1. If you can determine timezone from user input, call setTimezone tool
2. If successful, welcome them and ask what you can help with
3. If unclear, ask for clarification with examples. Never guess.

Be friendly and concise."""


class SetTimezoneTool(Tool):
    """Commits the user's UTC offset to their profile."""

    name = "setTimezone"
    description = "Set the user's timezone after determining it from their input"
    parameters = {
        "type": "object",
        "properties": {
            "timezone": {
                "type": "string",
                "description": "Timezone in UTC format (e.g., 'UTC-5', 'UTC+1', 'UTC+5:30')",
            }
        },
        "required": ["timezone"],
        "additionalProperties": False,
    }

    def __init__(self, profile_service: ProfileService, profile_id: UUID) -> None:
        self._profile_service = profile_service
        self._profile_id = profile_id
        self.committed: str | None = None

    async def call(self, args: dict[str, Any]) -> dict[str, Any]:
        timezone = args.get("timezone")
        if not isinstance(timezone, str) or not timezone.strip():
            return {"success": False, "message": "A timezone string is required"}

        try:
            profile = await self._profile_service.set_timezone(self._profile_id, timezone)
        except AppException as e:
            return {"success": False, "message": e.message}

        self.committed = profile.timezone
        return {"success": True, "message": f"Timezone set to {profile.timezone}"}


class OnboardingService:
    """Runs the timezone sub-dialogue for profiles that have no timezone yet.

    The reply goes out through the delivery callback, never through the
    processing pipeline; the message that commits the timezone is not
    processed any further.
    """

    def __init__(
        self,
        llm: LLM,
        profile_service: ProfileService,
        telegram: TelegramClient,
        downstream: DownstreamClient,
        max_steps: int = 3,
    ) -> None:
        self._llm = llm
        self._profile_service = profile_service
        self._telegram = telegram
        self._downstream = downstream
        self._max_steps = max_steps

    async def run(self, context: RequestContext) -> WebhookStatus:
        """Handle one message while the profile awaits its timezone.

        Never raises: failures fall back to a direct prompt to the user.
        """
        try:
            tool = SetTimezoneTool(self._profile_service, context.profile_id)
            agent = ToolAgent(
                llm=self._llm,
                system_prompt=TIMEZONE_SYSTEM_PROMPT,
                tools=[tool],
                max_steps=self._max_steps,
            )
            answer = await agent.answer(context.intent.prompt)

            await self._downstream.deliver_reply(
                {
                    "finalResponse": answer.content,
                    "chatId": context.intent.chat_id,
                    "profileId": str(context.profile_id),
                    "metadata": context.metadata(),
                    "timezone": None,
                    "role": INCOMING_ROLE,
                }
            )
        except Exception as e:
            logger.error(
                "onboarding_failed",
                profile_id=str(context.profile_id),
                error=str(e),
                error_type=type(e).__name__,
            )
            await self._telegram.send_message(context.intent.chat_id, FALLBACK_MESSAGE)
            return WebhookStatus.TIMEZONE_SETUP_ERROR

        logger.info(
            "onboarding_turn_handled",
            profile_id=str(context.profile_id),
            steps=answer.steps,
            timezone_committed=tool.committed is not None,
        )
        return WebhookStatus.TIMEZONE_SETUP_HANDLED
