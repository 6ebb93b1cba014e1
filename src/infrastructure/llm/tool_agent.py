"""Bounded tool-calling loop.

``ToolAgent`` lets the model call the tools it is given, feeds each result
back as a TOOL message, and stops when the model answers without tool calls
or after ``max_steps`` model calls, whichever comes first. The answer is the
text of the last model call, which may be empty if the budget ran out while
the model was still calling tools.
"""

import json
from dataclasses import dataclass, field
from typing import Any

import structlog

from infrastructure.llm.base import LLM, LLMMessage, Roles, Tool, ToolCall

logger = structlog.get_logger()


@dataclass
class ToolCallRecord:
    """One executed tool call and what it returned to the model."""

    name: str
    arguments: dict[str, Any]
    result: dict[str, Any]


@dataclass
class AgentAnswer:
    """Final text plus the tool calls made on the way."""

    content: str
    steps: int
    tool_calls: list[ToolCallRecord] = field(default_factory=list)


class ToolAgent:
    """Single-turn agent with a fixed system prompt and a fixed tool set."""

    def __init__(
        self,
        llm: LLM,
        system_prompt: str,
        tools: list[Tool],
        max_steps: int = 3,
    ) -> None:
        if max_steps < 1:
            raise ValueError("max_steps must be at least 1")
        self.llm = llm
        self.system_prompt = system_prompt
        self.tools = tools
        self.max_steps = max_steps

    async def answer(self, query: str) -> AgentAnswer:
        """Run the loop for one user message."""
        messages = [
            LLMMessage(role=Roles.SYSTEM, content=self.system_prompt),
            LLMMessage(role=Roles.USER, content=query),
        ]
        records: list[ToolCallRecord] = []
        content = ""

        for step in range(1, self.max_steps + 1):
            response = await self.llm.generate(messages, tools=self.tools)
            content = response.content
            messages.append(
                LLMMessage(
                    role=Roles.ASSISTANT,
                    content=response.content,
                    tool_calls=response.tool_calls,
                )
            )

            if not response.tool_calls:
                return AgentAnswer(content=content, steps=step, tool_calls=records)

            for tool_call in response.tool_calls:
                record = await self._execute(tool_call)
                records.append(record)
                messages.append(
                    LLMMessage(
                        role=Roles.TOOL,
                        content=json.dumps(record.result),
                        tool_call_id=tool_call.id,
                        name=record.name,
                    )
                )

        logger.info("tool_agent_step_budget_exhausted", max_steps=self.max_steps)
        return AgentAnswer(content=content, steps=self.max_steps, tool_calls=records)

    async def _execute(self, tool_call: ToolCall) -> ToolCallRecord:
        """Run one call; unknown tools and bad arguments are reported to the model."""
        name = tool_call.function.name
        available = {tool.name: tool for tool in self.tools}
        tool = available.get(name)
        if tool is None:
            return ToolCallRecord(name=name, arguments={}, result={"error": f"Unknown tool: {name}"})

        try:
            arguments = json.loads(tool_call.function.arguments or "{}")
        except json.JSONDecodeError:
            return ToolCallRecord(
                name=name, arguments={}, result={"error": "Arguments are not valid JSON"}
            )
        if not isinstance(arguments, dict):
            return ToolCallRecord(
                name=name, arguments={}, result={"error": "Arguments must be a JSON object"}
            )

        result = await tool.call(arguments)
        return ToolCallRecord(name=name, arguments=arguments, result=result)
