import pytest

from roybot.db.repositories import UserRepository
from roybot.services.ai_provider import AIProviderError
from roybot.services.chat import (
    GREETINGS,
    create_greeting,
    create_system_prompt,
    resolve_user_name,
    send_to_bot,
    suggest_exercise,
)

pytestmark = pytest.mark.anyio


class RecordingProvider:
    def __init__(self, reply: str = "I'm listening.", error: bool = False):
        self.reply = reply
        self.error = error
        self.calls = []

    async def generate(self, prompt, system=None):
        self.calls.append((prompt, system))
        if self.error:
            raise AIProviderError("down")
        return self.reply


def test_system_prompt_addresses_user() -> None:
    prompt = create_system_prompt("Ana")
    assert "Address the user as Ana." in prompt
    assert "ROY" in prompt


def test_greeting_fills_in_name(monkeypatch) -> None:
    monkeypatch.setattr("roybot.services.chat.random.choice", lambda options: options[1])
    assert create_greeting("Ana") == "Hello, Ana. I'm Roy, ready to chat. How can I help today?"


def test_exercise_suggestion_mentions_context() -> None:
    assert "Reflect on my breakup" in suggest_exercise("my breakup", "Ana")
    assert suggest_exercise("work").startswith("Here's an exercise for User:")


async def test_send_to_bot_uses_persona_prompt() -> None:
    provider = RecordingProvider()

    reply = await send_to_bot(provider, "I feel stuck", "Ana")

    assert reply == "I'm listening."
    prompt, system = provider.calls[0]
    assert prompt.startswith(tuple(g.format(name="Ana") for g in GREETINGS))
    assert prompt.endswith(" I feel stuck")
    assert "Ana" in system


async def test_send_to_bot_propagates_provider_error() -> None:
    with pytest.raises(AIProviderError):
        await send_to_bot(RecordingProvider(error=True), "hello")


class TestResolveUserName:
    async def test_explicit_name_wins(self, manager) -> None:
        assert await resolve_user_name("  Bo ", 1, UserRepository(manager)) == "Bo"

    async def test_falls_back_to_stored_user(self, manager) -> None:
        users = UserRepository(manager)
        user_id = (await users.create({"name": "Ana", "email": "a@x.com", "password_hash": "h"})).unwrap()

        assert await resolve_user_name(None, user_id, users) == "Ana"

    async def test_unknown_user_defaults(self, manager) -> None:
        assert await resolve_user_name(None, 99, UserRepository(manager)) == "User"

    async def test_nothing_given_defaults(self) -> None:
        assert await resolve_user_name(None, None) == "User"
