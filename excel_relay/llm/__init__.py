"""
Client for the upstream chat-completion provider.

The relay doesn't care which OpenAI-compatible provider is behind the URL -
it sends one payload and gets one completion back via HTTP.
"""
from .client import UpstreamClient

__all__ = ["UpstreamClient"]
