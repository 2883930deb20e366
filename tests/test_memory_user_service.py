"""
Users API: In-Memory User Service Unit Tests
=============================================

What:  Tests for MemoryUserService CRUD and its soft-failure reporting.
How:   A fresh service per test; no app, no database.
"""

import pytest

from users_api.results import SoftFailure, Success
from users_api.schemas.user import CreateUserRequest, UpdateUserRequest
from users_api.services.memory_user_service import MemoryUserService


def _payload(n: int = 1) -> CreateUserRequest:
    return CreateUserRequest(
        first_name="John",
        last_name="Doe",
        username=f"john_doe{n}",
        email=f"john{n}@example.com",
        password="strongpassword123",
    )


class TestMemoryUserServiceCreate:

    def setup_method(self):
        self.service = MemoryUserService()

    @pytest.mark.asyncio
    async def test_create_assigns_incrementing_ids(self):
        first = await self.service.create(_payload(1))
        second = await self.service.create(_payload(2))

        assert isinstance(first, Success)
        assert first.message == "User created successfully"
        assert first.data.id == 1
        assert second.data.id == 2

    @pytest.mark.asyncio
    async def test_password_is_not_exposed(self):
        result = await self.service.create(_payload())
        assert "password" not in result.data.model_dump()


class TestMemoryUserServiceQueries:

    def setup_method(self):
        self.service = MemoryUserService()

    @pytest.mark.asyncio
    async def test_find_all_empty(self):
        result = await self.service.find_all()
        assert result.data == []
        assert result.message == "No users found"

    @pytest.mark.asyncio
    async def test_find_all(self):
        await self.service.create(_payload(1))
        await self.service.create(_payload(2))

        result = await self.service.find_all()
        assert [u.username for u in result.data] == ["john_doe1", "john_doe2"]
        assert result.message == "Users retrieved successfully"

    @pytest.mark.asyncio
    async def test_find_one_missing_is_soft_failure(self):
        result = await self.service.find_one(42)
        assert isinstance(result, SoftFailure)
        assert result.status_code == 404
        assert result.message == "User with ID 42 not found"


class TestMemoryUserServiceMutations:

    def setup_method(self):
        self.service = MemoryUserService()

    @pytest.mark.asyncio
    async def test_update_changes_only_given_fields(self):
        await self.service.create(_payload())

        result = await self.service.update(1, UpdateUserRequest(username="renamed"))

        assert result.message == "User updated successfully"
        assert result.data.username == "renamed"
        assert result.data.email == "john1@example.com"
        assert result.data.updated_at is not None

    @pytest.mark.asyncio
    async def test_update_missing(self):
        result = await self.service.update(9, UpdateUserRequest(username="renamed"))
        assert isinstance(result, SoftFailure)
        assert result.status_code == 404

    @pytest.mark.asyncio
    async def test_remove(self):
        await self.service.create(_payload())

        result = await self.service.remove(1)
        assert result.message == "User removed successfully"
        assert result.data.id == 1
        assert isinstance(await self.service.find_one(1), SoftFailure)

    @pytest.mark.asyncio
    async def test_remove_many_counts_existing_only(self):
        for n in range(1, 4):
            await self.service.create(_payload(n))

        result = await self.service.remove_many([1, 3, 99])

        assert result.data.count == 2
        assert result.message == "2 users removed successfully"
        remaining = await self.service.find_all()
        assert [u.id for u in remaining.data] == [2]

    @pytest.mark.asyncio
    async def test_remove_many_nothing_matched(self):
        result = await self.service.remove_many([7, 8])
        assert isinstance(result, SoftFailure)
        assert result.status_code == 404
        assert result.message == "Users not found"

    @pytest.mark.asyncio
    async def test_ids_are_not_reused(self):
        await self.service.create(_payload(1))
        await self.service.remove(1)
        result = await self.service.create(_payload(2))
        assert result.data.id == 2
