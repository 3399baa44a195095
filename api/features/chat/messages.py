"""Conversion between chat DTOs and LangChain messages."""
from typing import Any, List, Union

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage

from api.features.chat.dtos import ChatMessageDTO
from api.features.chat.entities.message import MessageRole


def to_langchain_messages(messages: List[ChatMessageDTO]) -> List[BaseMessage]:
    return [
        HumanMessage(content=m.content)
        if m.role == MessageRole.USER
        else AIMessage(content=m.content)
        for m in messages
    ]


def content_text(content: Union[str, List[Any]]) -> str:
    """Plain text of a message or chunk; content blocks keep only their text parts."""
    if isinstance(content, str):
        return content
    return "".join(
        block if isinstance(block, str) else block.get("text", "")
        for block in content
        if isinstance(block, (str, dict))
    )
