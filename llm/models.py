"""
LLM Client Data Models

This module defines the conversation and tool models exchanged between the
orchestrator and the LLM clients.
"""
from enum import Enum
from typing import Annotated, Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


class ToolCall(BaseModel):
    """Represents a tool call requested by the LLM"""
    tool_name: str
    arguments: Dict[str, Any] = Field(default_factory=dict)


class TextContent(BaseModel):
    type: Literal["text"] = "text"
    text: str


class ToolCallContent(BaseModel):
    type: Literal["tool_call"] = "tool_call"
    call: ToolCall


class ToolResultContent(BaseModel):
    type: Literal["tool_result"] = "tool_result"
    tool_name: str
    result: str


TurnContent = Annotated[
    Union[TextContent, ToolCallContent, ToolResultContent],
    Field(discriminator="type"),
]


class ConversationTurn(BaseModel):
    """One entry of the conversation history"""
    model_config = ConfigDict(frozen=True)

    role: Role
    content: TurnContent

    @classmethod
    def user(cls, text: str) -> "ConversationTurn":
        return cls(role=Role.USER, content=TextContent(text=text))

    @classmethod
    def assistant(cls, text: str) -> "ConversationTurn":
        return cls(role=Role.ASSISTANT, content=TextContent(text=text))

    @classmethod
    def tool_call(cls, call: ToolCall) -> "ConversationTurn":
        return cls(role=Role.ASSISTANT, content=ToolCallContent(call=call))

    @classmethod
    def tool_result(cls, tool_name: str, result: str) -> "ConversationTurn":
        return cls(role=Role.TOOL, content=ToolResultContent(tool_name=tool_name, result=result))


class ToolDeclaration(BaseModel):
    """A tool as offered to the LLM"""
    name: str
    description: str = ""
    parameters: Dict[str, Any] = Field(default_factory=lambda: {"type": "object", "properties": {}})


class EngineReply(BaseModel):
    """What the LLM answered: either final text or a tool call"""
    text: Optional[str] = None
    tool_call: Optional[ToolCall] = None

    @property
    def is_tool_call(self) -> bool:
        return self.tool_call is not None
