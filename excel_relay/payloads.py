"""
Inbound request classification and upstream payload construction.

A ChatRequest is resolved once into one of four input variants. Each
variant knows which model it goes to and how its message list is built.
"""
import logging
from dataclasses import dataclass
from typing import Any, Optional, Union

from .config import Settings
from .errors import BadRequestError
from .models import ChatRequest

logger = logging.getLogger(__name__)


ACTION_SYSTEM_PROMPT = """You are an assistant that edits spreadsheets.
Reply ONLY with a JSON array of actions. Do not add explanations, Markdown or code fences.

Each action is an object describing one cell edit, for example:
[{"cell": "A1", "value": "Total"}, {"cell": "B2", "formula": "=SUM(B1:B10)"}]

Use A1-style cell references. Put literal values in "value" and formulas in "formula".
If nothing should change, reply with an empty array: []"""


@dataclass
class TextPrompt:
    """Single-turn text message."""
    message: str


@dataclass
class VisionPrompt:
    """Text message with one attached image (URL or base64 data)."""
    message: str
    image: str


@dataclass
class ConversationHistory:
    """Caller-supplied message list, forwarded as-is."""
    messages: list[dict[str, Any]]


@dataclass
class ActionPrompt:
    """Spreadsheet prompt answered with a JSON action list."""
    prompt: str


InputVariant = Union[TextPrompt, VisionPrompt, ConversationHistory, ActionPrompt]


@dataclass
class UpstreamPayload:
    """Body of the chat-completion call."""
    model: str
    messages: list[dict[str, Any]]
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None

    def to_json(self) -> dict:
        body: dict[str, Any] = {"model": self.model, "messages": self.messages}
        if self.temperature is not None:
            body["temperature"] = self.temperature
        if self.max_tokens is not None:
            body["max_tokens"] = self.max_tokens
        return body


def _require_text(value: str, field: str) -> str:
    if not value.strip():
        raise BadRequestError(f"'{field}' must not be empty")
    return value


def classify_request(request: ChatRequest) -> InputVariant:
    """
    Resolve an inbound request into its input variant.

    Raises:
        BadRequestError: no usable field, or a blank message/prompt
    """
    if request.message is not None:
        message = _require_text(request.message, "message")
        if request.image_url is not None:
            return VisionPrompt(message=message, image=_require_text(request.image_url, "image_url"))
        if request.image_base64 is not None:
            return VisionPrompt(message=message, image=_require_text(request.image_base64, "image_base64"))
        return TextPrompt(message=message)

    if request.messages is not None:
        if not request.messages:
            raise BadRequestError("'messages' must not be empty")
        return ConversationHistory(
            messages=[m.model_dump(exclude_unset=True) for m in request.messages]
        )

    if request.prompt is not None:
        return ActionPrompt(prompt=_require_text(request.prompt, "prompt"))

    raise BadRequestError("No valid input provided: expected 'message', 'messages' or 'prompt'")


def build_payload(variant: InputVariant, settings: Settings) -> UpstreamPayload:
    """Select the model and message list for an input variant."""
    if isinstance(variant, VisionPrompt):
        model = settings.vision_model
        messages = [{
            "role": "user",
            "content": [
                {"type": "text", "text": variant.message},
                {"type": "image_url", "image_url": {"url": variant.image}},
            ],
        }]
    elif isinstance(variant, TextPrompt):
        model = settings.text_model
        messages = [{"role": "user", "content": variant.message}]
    elif isinstance(variant, ConversationHistory):
        model = settings.text_model
        messages = variant.messages
    elif isinstance(variant, ActionPrompt):
        model = settings.action_model
        messages = [
            {"role": "system", "content": ACTION_SYSTEM_PROMPT},
            {"role": "user", "content": variant.prompt},
        ]
    else:
        raise TypeError(f"Unknown input variant: {type(variant).__name__}")

    logger.debug(
        "Upstream payload: variant=%s, model=%s, messages=%d",
        type(variant).__name__, model, len(messages)
    )

    return UpstreamPayload(
        model=model,
        messages=messages,
        temperature=settings.temperature,
        max_tokens=settings.max_tokens,
    )
