"""HTTP clients for GitHub and the chat-completion providers."""

from repolens.clients.client_chat_completion import DEFAULT_ENDPOINTS, ChatCompletionClient
from repolens.clients.client_github import RATE_LIMIT_MESSAGE, GitHubContentClient, build_tree
from repolens.clients.protocols import ProtocolCompletionProvider, ProtocolContentFetcher

__all__ = [
    "DEFAULT_ENDPOINTS",
    "RATE_LIMIT_MESSAGE",
    "ChatCompletionClient",
    "GitHubContentClient",
    "ProtocolCompletionProvider",
    "ProtocolContentFetcher",
    "build_tree",
]
