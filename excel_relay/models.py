"""
Pydantic models for the relay API.
"""
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict


class Message(BaseModel):
    """A single message in a conversation."""
    model_config = ConfigDict(extra="allow")  # e.g. "name" passes through

    role: str  # "system", "user", or "assistant"
    content: Union[str, list[Any], dict[str, Any]]  # text or multimodal parts


class ChatRequest(BaseModel):
    """
    Request body for POST /chat.

    Exactly one shape is used, checked in this order:
    message (+ optional image), messages, prompt.
    """
    prompt: Optional[str] = None
    message: Optional[str] = None
    image_url: Optional[str] = None
    image_base64: Optional[str] = None
    messages: Optional[list[Message]] = None


class ChatReply(BaseModel):
    """Free-form chat answer."""
    reply: str


class ActionsReply(BaseModel):
    """Spreadsheet action list."""
    actions: list[Any]


class TextResponse(BaseModel):
    """Plain-text answer to an action prompt (lenient mode only)."""
    response: str


class ErrorResponse(BaseModel):
    """Body of every failed request."""
    error: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str  # "ok" or "degraded"
    api_key_configured: bool
    text_model: str
    vision_model: str
    action_model: str
    action_mode: str
