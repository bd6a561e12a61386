"""
Unit tests for UserService: lookup, listing and self-update.
"""

import pytest

from src.adapters.repository.memory import InMemoryUserRepository
from src.domain.exceptions import ForbiddenFailure, NotFoundFailure, ValidationFailure
from src.domain.users import UserService


class TestGetUser:
    def test_returns_active_user(self, user_service: UserService, add_user) -> None:
        user = add_user(username="user1")
        assert user_service.get_user(user.id).username == "user1"

    def test_missing_user_not_found(self, user_service: UserService) -> None:
        with pytest.raises(NotFoundFailure):
            user_service.get_user(5)

    def test_pending_user_not_found(self, user_service: UserService, add_user) -> None:
        """PENDING accounts are not publicly visible."""
        user = add_user(inactive=True)
        with pytest.raises(NotFoundFailure):
            user_service.get_user(user.id)


class TestListUsers:
    def test_page_of_active_users(self, user_service: UserService, add_user) -> None:
        for _ in range(11):
            add_user()
        add_user(inactive=True)

        page = user_service.list_users(page=0, size=10)

        assert len(page.content) == 10
        assert page.page == 0
        assert page.size == 10
        assert page.total_pages == 2

    def test_second_page(self, user_service: UserService, add_user) -> None:
        users = [add_user() for _ in range(11)]

        page = user_service.list_users(page=1, size=10)

        assert [u.id for u in page.content] == [users[-1].id]

    def test_excludes_caller(self, user_service: UserService, add_user) -> None:
        caller = add_user()
        other = add_user()

        page = user_service.list_users(page=0, size=10, exclude_id=caller.id)

        assert [u.id for u in page.content] == [other.id]
        assert page.total_pages == 1

    def test_empty_listing(self, user_service: UserService) -> None:
        page = user_service.list_users(page=0, size=10)
        assert page.content == []
        assert page.total_pages == 0


class TestUpdateUser:
    def test_owner_updates_username(
        self, user_service: UserService, repository: InMemoryUserRepository, add_user
    ) -> None:
        user = add_user(username="user1")

        user_service.update_user(user.id, user.id, username="user1-updated")

        assert repository.find_by_id(user.id).username == "user1-updated"

    def test_other_user_forbidden(
        self, user_service: UserService, repository: InMemoryUserRepository, add_user
    ) -> None:
        owner = add_user(username="user1")
        intruder = add_user()

        with pytest.raises(ForbiddenFailure):
            user_service.update_user(intruder.id, owner.id, username="hacked")

        assert repository.find_by_id(owner.id).username == "user1"

    def test_none_leaves_username(
        self, user_service: UserService, repository: InMemoryUserRepository, add_user
    ) -> None:
        user = add_user(username="user1")
        user_service.update_user(user.id, user.id, username=None)
        assert repository.find_by_id(user.id).username == "user1"

    def test_invalid_username_rejected(self, user_service: UserService, add_user) -> None:
        user = add_user()
        with pytest.raises(ValidationFailure) as exc_info:
            user_service.update_user(user.id, user.id, username="usr")
        assert exc_info.value.errors == {"username": "username_size"}
