"""
The relay handler: classify, call upstream once, reshape the reply.
"""
import json
import logging
import re
from dataclasses import dataclass
from typing import Union

from .config import Settings
from .errors import ConfigurationError, UnprocessableReplyError
from .llm import UpstreamClient
from .models import ActionsReply, ChatReply, ChatRequest, TextResponse
from .payloads import ActionPrompt, build_payload, classify_request

logger = logging.getLogger(__name__)

_CODE_FENCE = re.compile(r"^```[a-zA-Z]*\s*(.*?)\s*```$", re.DOTALL)

RelayReply = Union[ChatReply, ActionsReply, TextResponse]


@dataclass(frozen=True)
class RelayContext:
    """Read-only state shared by every request."""
    settings: Settings
    upstream: UpstreamClient


def strip_code_fence(content: str) -> str:
    """Remove a surrounding Markdown code fence, if the model added one."""
    match = _CODE_FENCE.match(content)
    return match.group(1) if match else content


def parse_actions(content: str, strict: bool) -> Union[ActionsReply, TextResponse]:
    """
    Turn trimmed model content into an action list.

    A JSON array is always accepted and other JSON is always rejected.
    Content that is not JSON at all is rejected in strict mode and
    returned as plain text in lenient mode.

    Raises:
        UnprocessableReplyError: content is not an acceptable action list
    """
    try:
        actions = json.loads(strip_code_fence(content))
    except ValueError:
        if strict:
            logger.warning("Model reply is not valid JSON (first 200 chars): %s", content[:200])
            raise UnprocessableReplyError("model reply is invalid JSON; expected an array of actions")
        return TextResponse(response=content)

    if not isinstance(actions, list):
        logger.warning("Model reply is JSON %s, not an array", type(actions).__name__)
        raise UnprocessableReplyError("model reply is valid JSON but not an array of actions")

    return ActionsReply(actions=actions)


async def handle_chat(request: ChatRequest, context: RelayContext) -> RelayReply:
    """
    Relay one chat request.

    Raises:
        RelayError: any failure, carrying the status to report
    """
    settings = context.settings

    variant = classify_request(request)

    if not settings.has_api_key:
        logger.error("GROQ_API_KEY not set, refusing to call upstream")
        raise ConfigurationError("API key not found")

    payload = build_payload(variant, settings)
    content = (await context.upstream.complete(payload)).strip()

    if isinstance(variant, ActionPrompt):
        return parse_actions(content, strict=settings.action_mode == "strict")
    return ChatReply(reply=content)
