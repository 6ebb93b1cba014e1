"""Language-model abstractions for tool calling.

The message format mirrors the OpenAI chat completions API so the concrete
adapter stays a thin translation layer, and tests can drive ``ToolAgent``
with a scripted fake instead of a live model.
"""

from abc import ABC, abstractmethod
from enum import StrEnum
from typing import Any, Literal, TypedDict

from pydantic import BaseModel


class Roles(StrEnum):
    """Conversation roles as used by the OpenAI chat completions API."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


class Function(BaseModel):
    """The function name and JSON-encoded arguments inside a tool call."""

    name: str
    arguments: str


class ToolCall(BaseModel):
    """A single tool invocation requested by the model."""

    id: str
    function: Function
    type: str = "function"


class LLMMessage(BaseModel):
    """
    A single message sent to or received from the model.

    ``tool_calls`` is set when the assistant requests tool invocations;
    ``tool_call_id`` and ``name`` are set on the TOOL message carrying a
    result back.
    """

    content: str = ""
    role: Roles = Roles.ASSISTANT
    tool_calls: list[ToolCall] | None = None
    tool_call_id: str | None = None
    name: str | None = None


class FunctionDescription(TypedDict):
    """JSON schema fragment describing a callable function."""

    name: str
    description: str
    parameters: dict[str, Any]


class ToolDescription(TypedDict):
    """Full tool descriptor in the format expected by OpenAI-compatible APIs."""

    type: Literal["function"]
    function: FunctionDescription


class Tool(ABC):
    """A capability the model may invoke.

    Subclasses declare ``name``, ``description`` and ``parameters`` as class
    attributes; ``call`` receives the decoded arguments and returns a
    JSON-serialisable result for the model.
    """

    name: str
    description: str
    parameters: dict[str, Any]

    @abstractmethod
    async def call(self, args: dict[str, Any]) -> dict[str, Any]:
        """Execute the tool with the model-supplied arguments."""
        pass

    def json_schema(self) -> ToolDescription:
        """Return the tool descriptor in OpenAI function-calling format."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }


class LLM(ABC):
    """Abstract base class for language model backends."""

    @abstractmethod
    async def generate(
        self, conversation: list[LLMMessage], tools: list[Tool] | None = None
    ) -> LLMMessage:
        """Return one complete assistant message for the conversation."""
        pass
