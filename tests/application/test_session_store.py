"""
Test suite for the in-memory session store.

System role: Verification of history bounds and per-key serialization
"""

import asyncio

import pytest

from course_assistant.application.session_store import InMemorySessionStore
from course_assistant.models.session import OfferedCourse, SessionState


class TestInMemorySessionStore:
    """Tests for InMemorySessionStore."""

    @pytest.mark.asyncio
    async def test_unknown_key_returns_empty_state(self, session_store: InMemorySessionStore) -> None:
        state = await session_store.get("nadie")

        assert state == SessionState()
        assert len(session_store) == 0

    @pytest.mark.asyncio
    async def test_history_keeps_last_three_turns(self, session_store: InMemorySessionStore) -> None:
        # Arrange / Act
        for i in range(5):
            await session_store.append_turn("s1", f"pregunta {i}", f"respuesta {i}")

        # Assert
        state = await session_store.get("s1")
        assert len(state.history) == 6
        assert state.history[0].content == "pregunta 2"
        assert state.history[-1].content == "respuesta 4"
        assert [turn.role for turn in state.history[:2]] == ["user", "assistant"]

    @pytest.mark.asyncio
    async def test_last_offered_is_overwritten(self, session_store: InMemorySessionStore) -> None:
        first = OfferedCourse(course_id="1", title="Costura", enrollment_form_url="https://forms.gle/a")
        second = OfferedCourse(course_id="5", title="Peluquería", enrollment_form_url="https://forms.gle/b")

        await session_store.set_last_offered("s1", first)
        await session_store.set_last_offered("s1", second)

        assert (await session_store.get("s1")).last_offered_course == second

    @pytest.mark.asyncio
    async def test_returned_state_is_a_copy(self, session_store: InMemorySessionStore) -> None:
        await session_store.append_turn("s1", "hola", "chau")

        state = await session_store.get("s1")
        state.history.clear()

        assert len((await session_store.get("s1")).history) == 2

    @pytest.mark.asyncio
    async def test_sessions_are_isolated(self, session_store: InMemorySessionStore) -> None:
        await session_store.append_turn("a", "hola", "chau")

        assert (await session_store.get("b")).history == []

    @pytest.mark.asyncio
    async def test_lock_serializes_turns_for_same_key(self, session_store: InMemorySessionStore) -> None:
        # Arrange
        events: list[str] = []

        async def turn(name: str) -> None:
            async with session_store.lock("s1"):
                events.append(f"{name}:start")
                await asyncio.sleep(0.01)
                events.append(f"{name}:end")

        # Act
        await asyncio.gather(turn("a"), turn("b"))

        # Assert
        assert events in (
            ["a:start", "a:end", "b:start", "b:end"],
            ["b:start", "b:end", "a:start", "a:end"],
        )

    @pytest.mark.asyncio
    async def test_lock_does_not_block_other_keys(self, session_store: InMemorySessionStore) -> None:
        events: list[str] = []

        async def turn(key: str) -> None:
            async with session_store.lock(key):
                events.append(f"{key}:start")
                await asyncio.sleep(0.01)
                events.append(f"{key}:end")

        await asyncio.gather(turn("a"), turn("b"))

        assert events[:2] == ["a:start", "b:start"]
