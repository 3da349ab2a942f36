"""
Tests for the user directory: registration, login, sessions, logout.
"""

import asyncio

import pytest

from tasklist.auth.passwords import PasswordHasher
from tasklist.core.errors import AuthError, ValidationError
from tasklist.services.users import UserDirectory
from tasklist.storage import Collections


class TestRegister:
    @pytest.mark.asyncio
    async def test_register(self, users, storage):
        user, token = await users.register("a@x.com", "secret123")

        assert user.email == "a@x.com"
        assert [s.token for s in user.sessions] == [token]

        stored = await storage.get(Collections.USERS, user.id)
        assert stored["password_hash"] != "secret123"
        assert stored["sessions"] == [{"token": token, "purpose": "auth"}]

    @pytest.mark.asyncio
    async def test_email_is_trimmed_not_lowercased(self, users):
        user, _ = await users.register("  Mixed.Case@Gmail.com ", "secret123")
        assert user.email == "Mixed.Case@Gmail.com"
        assert await users.find_by_email("Mixed.Case@Gmail.com") is not None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("email", ["", "   ", "gfgfd@ff", "no-at-sign", None])
    async def test_invalid_email(self, users, storage, email):
        with pytest.raises(ValidationError) as exc:
            await users.register(email, "secret123")
        assert exc.value.kind == "invalid_email"
        assert await storage.query(Collections.USERS) == []

    @pytest.mark.asyncio
    async def test_short_password(self, users, storage):
        with pytest.raises(ValidationError) as exc:
            await users.register("a@x.com", "24")
        assert exc.value.kind == "weak_password"
        assert await storage.query(Collections.USERS) == []

    @pytest.mark.asyncio
    async def test_duplicate_email(self, users, alice):
        with pytest.raises(ValidationError) as exc:
            await users.register("alice@gmail.com", "otherpass")
        assert exc.value.kind == "duplicate_email"

    @pytest.mark.asyncio
    async def test_duplicate_caught_by_store(self, users, alice, monkeypatch):
        """Even when the pre-check misses, the unique index rejects it."""
        async def no_match(email):
            return None
        monkeypatch.setattr(users, "find_by_email", no_match)

        with pytest.raises(ValidationError) as exc:
            await users.register("alice@gmail.com", "otherpass")
        assert exc.value.kind == "duplicate_email"

    @pytest.mark.asyncio
    async def test_concurrent_registration(self, users, storage):
        results = await asyncio.gather(
            users.register("race@gmail.com", "secret123"),
            users.register("race@gmail.com", "secret123"),
            return_exceptions=True,
        )
        errors = [r for r in results if isinstance(r, ValidationError)]
        assert len(errors) == 1
        assert errors[0].kind == "duplicate_email"
        assert len(await storage.query(Collections.USERS, {"email": "race@gmail.com"})) == 1


class TestLogin:
    @pytest.mark.asyncio
    async def test_login_adds_session(self, users, resolver, alice):
        user, first = alice
        logged_in, second = await users.login("alice@gmail.com", "alicepass1")

        assert logged_in.id == user.id
        assert second != first
        assert [s.token for s in logged_in.sessions] == [first, second]

        # Both sessions are live
        assert (await resolver.resolve(first)).user_id == user.id
        assert (await resolver.resolve(second)).user_id == user.id

    @pytest.mark.asyncio
    async def test_wrong_password_and_unknown_email_look_the_same(self, users, alice):
        with pytest.raises(AuthError) as wrong:
            await users.login("alice@gmail.com", "wrong")
        with pytest.raises(AuthError) as unknown:
            await users.login("nobody@gmail.com", "wrong")

        assert wrong.value.kind == unknown.value.kind == "invalid_credentials"
        assert str(wrong.value) == str(unknown.value)

    @pytest.mark.asyncio
    async def test_failed_login_adds_no_session(self, users, alice):
        user, _ = alice
        with pytest.raises(AuthError):
            await users.login("alice@gmail.com", "wrong")
        assert len((await users.find_by_id(user.id)).sessions) == 1

    @pytest.mark.asyncio
    async def test_concurrent_logins_keep_every_session(self, users, alice):
        user, first = alice
        results = await asyncio.gather(*[
            users.login("alice@gmail.com", "alicepass1") for _ in range(5)
        ])

        stored = await users.find_by_id(user.id)
        tokens = [s.token for s in stored.sessions]
        assert tokens[0] == first
        assert set(tokens[1:]) == {token for _, token in results}
        assert len(tokens) == 6


class TestLogout:
    @pytest.mark.asyncio
    async def test_logout_removes_only_that_session(self, users, resolver, alice):
        user, first = alice
        _, second = await users.login("alice@gmail.com", "alicepass1")

        await users.logout(user, second)

        stored = await users.find_by_id(user.id)
        assert [s.token for s in stored.sessions] == [first]
        assert (await resolver.resolve(first)).user_id == user.id
        with pytest.raises(AuthError):
            await resolver.resolve(second)

    @pytest.mark.asyncio
    async def test_logout_twice_is_a_noop(self, users, alice):
        user, token = alice
        await users.logout(user, token)
        await users.logout(user, token)
        assert (await users.find_by_id(user.id)).sessions == []


class TestLookup:
    @pytest.mark.asyncio
    async def test_find_by_id(self, users, alice):
        user, _ = alice
        found = await users.find_by_id(user.id)
        assert found.email == "alice@gmail.com"
        assert await users.find_by_id("user_missing") is None


class TestHashingOffLoop:
    @pytest.mark.asyncio
    async def test_loop_keeps_running_during_logins(self, storage, tokens):
        users = UserDirectory(storage, PasswordHasher(iterations=200_000), tokens)
        await users.register("slow@gmail.com", "slowpass1")

        ticks = 0
        done = False

        async def ticker():
            nonlocal ticks
            while not done:
                ticks += 1
                await asyncio.sleep(0)

        task = asyncio.create_task(ticker())
        await asyncio.sleep(0)
        try:
            await asyncio.gather(
                *(users.login("slow@gmail.com", "slowpass1") for _ in range(3)),
                users.login("nobody@gmail.com", "slowpass1"),
                return_exceptions=True,
            )
        finally:
            done = True
            await task

        # Each login hashes for tens of milliseconds; a blocked loop would
        # only tick between them
        assert ticks > 20
