"""OpenAI chat completions backend."""

from typing import Any, Optional

from openai import AsyncOpenAI

from core.config import settings
from infrastructure.llm.base import LLM, Function, LLMMessage, Roles, Tool, ToolCall


class OpenAILLM(LLM):
    """Adapter from ``LLMMessage`` conversations to the chat completions API."""

    def __init__(
        self,
        model: str = settings.openai_model,
        api_key: str = settings.openai_api_key,
        timeout: float = settings.http_timeout_seconds,
        client: Optional[AsyncOpenAI] = None,
    ) -> None:
        self._model = model
        self._client = client or AsyncOpenAI(api_key=api_key, timeout=timeout, max_retries=1)

    async def generate(
        self, conversation: list[LLMMessage], tools: list[Tool] | None = None
    ) -> LLMMessage:
        """Run one completion; tool calls are returned, not executed."""
        kwargs: dict[str, Any] = {
            "model": self._model,
            "messages": [self._to_openai(message) for message in conversation],
        }
        if tools:
            kwargs["tools"] = [tool.json_schema() for tool in tools]

        completion = await self._client.chat.completions.create(**kwargs)
        message = completion.choices[0].message

        tool_calls = [
            ToolCall(
                id=call.id,
                type=call.type,
                function=Function(
                    name=call.function.name,
                    arguments=call.function.arguments,
                ),
            )
            for call in (message.tool_calls or [])
            if call.type == "function"
        ]
        return LLMMessage(
            role=Roles.ASSISTANT,
            content=message.content or "",
            tool_calls=tool_calls or None,
        )

    @staticmethod
    def _to_openai(message: LLMMessage) -> dict[str, Any]:
        payload: dict[str, Any] = {"role": message.role.value, "content": message.content}
        if message.tool_calls:
            payload["tool_calls"] = [call.model_dump() for call in message.tool_calls]
        if message.role == Roles.TOOL:
            payload["tool_call_id"] = message.tool_call_id
        return payload
