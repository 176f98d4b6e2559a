"""Pydantic schemas for the model conversation and the chat-completions wire format."""
from typing import Any, Literal, Optional, Union
from pydantic import BaseModel, Field


class ToolFunction(BaseModel):
    name: str
    arguments: str = ""   # raw, untrusted; may be malformed JSON


class ToolCall(BaseModel):
    id: str
    type: Literal["function"] = "function"
    function: ToolFunction


class Message(BaseModel):
    role: Literal["system", "user", "assistant", "tool"]
    content: Optional[str] = None
    tool_calls: Optional[list[ToolCall]] = None
    tool_call_id: Optional[str] = None
    name: Optional[str] = None


class ToolChoiceFunction(BaseModel):
    name: str


class ToolChoice(BaseModel):
    type: Literal["function"] = "function"
    function: ToolChoiceFunction


class ChatCompletionRequest(BaseModel):
    messages: list[Message]
    tools: Optional[list[dict[str, Any]]] = None
    tool_choice: Optional[Union[Literal["auto", "none"], ToolChoice]] = None
    temperature: float = 0.1
    max_tokens: int = 1024
    model: Optional[str] = None   # None → gateway default


class AssistantMessage(BaseModel):
    role: str = "assistant"
    content: Optional[str] = None
    tool_calls: Optional[list[ToolCall]] = None


class Choice(BaseModel):
    message: AssistantMessage
    finish_reason: Optional[str] = None


class ChatCompletionResponse(BaseModel):
    id: Optional[str] = None
    choices: list[Choice] = Field(default_factory=list)
