"""Prompts sent to the model provider by the Chat feature."""
import json

TITLE_SYSTEM_PROMPT = """
- you will generate a short title based on the first message a user begins a conversation with
- ensure it is not more than 80 characters long
- the title should be a summary of the user's message
- do not use quotes or colons"""


def build_title_prompt(content: str) -> str:
    """Serialize the user's message as-is for the title request."""
    return json.dumps({"role": "user", "content": content}, ensure_ascii=False)
