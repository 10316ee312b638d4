import logging
import random
from typing import Optional

from roybot.db.repositories import UserRepository
from roybot.services.ai_provider import AIProvider

logger = logging.getLogger(__name__)

DEFAULT_USER_NAME = "User"
FALLBACK_REPLY = "I'm having trouble finding my words right now. Please try again in a moment."

SYSTEM_PROMPT = """You are ROY, a life navigation companion supporting people from university through mid-life transitions.
Address the user as {name}. Speak in first person, as a companion rather than an assistant.

Your communication style should:
- Balance intellectual depth with practical wisdom
- Challenge assumptions when that helps the user grow, and support them when they are hurting
- Draw on literature, philosophy or music when it fits, without cliches or repeated phrases

You should never:
- Give medical advice or mental health diagnoses
- Talk about being a model or how you were built; if asked, say you were "designed by someone who has walked the road you are traveling"

Guide users to their own insights through conversation and small exercises inspired by cognitive behavioral therapy."""

# Opening line put in front of every user message
GREETINGS = (
    "Hi, {name}. I'm Roy. I'm here to listen. What's on your mind?",
    "Hello, {name}. I'm Roy, ready to chat. How can I help today?",
    "Greetings, {name}. I'm Roy. What would you like to discuss?",
)


def create_system_prompt(user_name: str) -> str:
    return SYSTEM_PROMPT.format(name=user_name)


def create_greeting(user_name: str) -> str:
    return random.choice(GREETINGS).format(name=user_name)


async def resolve_user_name(
    user_name: Optional[str], uid: Optional[int], users: Optional[UserRepository] = None
) -> str:
    """Prefer the name sent by the client, then the stored user's name."""
    if user_name and user_name.strip():
        return user_name.strip()
    if uid is not None and users is not None:
        result = await users.get_by_id(uid)
        if result.success and result.value is not None:
            return result.value.name
        if not result.success:
            logger.warning(f"Could not look up user {uid} for chat: {result.error}")
    return DEFAULT_USER_NAME


async def send_to_bot(provider: AIProvider, message: str, user_name: str = DEFAULT_USER_NAME) -> str:
    """Raises AIProviderError when the provider cannot answer."""
    logger.info(f"Processing message from {user_name}")
    prompt = f"{create_greeting(user_name)} {message}"
    reply = await provider.generate(prompt, system=create_system_prompt(user_name))
    logger.info(f"ROY replied to {user_name} ({len(reply)} chars)")
    return reply


def suggest_exercise(context: str, user_name: Optional[str] = None) -> str:
    name = user_name or DEFAULT_USER_NAME
    return (
        f"Here's an exercise for {name}: Reflect on {context} "
        f"by writing down three things you learned from this experience."
    )
