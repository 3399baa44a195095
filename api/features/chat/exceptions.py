"""Exceptions for the Chat feature."""
from api.shared.exceptions import NotFoundError, UpstreamError, ValidationError


class ConversationNotFoundError(NotFoundError):
    """Raised when a conversation does not exist or belongs to another user."""

    def __init__(self, conversation_id: str):
        super().__init__(
            "Conversation", conversation_id, message="Conversation not found!"
        )


class UserMessageNotFoundError(ValidationError):
    """Raised when the history holds no message authored by the user."""

    def __init__(self):
        super().__init__("User message not found!")


class TitleGenerationError(UpstreamError):
    """Raised when the provider fails to produce a conversation title."""

    def __init__(self, error: str, model: str):
        super().__init__("Title generation", {"model": model, "error": error})


class CompletionStreamError(UpstreamError):
    """Raised into the relay when the completion stream breaks mid-turn."""

    def __init__(self, conversation_id: str, error: str):
        super().__init__(
            "Chat completion", {"conversation_id": conversation_id, "error": error}
        )
