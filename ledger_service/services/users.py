"""User management"""

import logging

from ledger_service.domain.exceptions import InternalError, InvalidRequestError, NotFoundError, StoreError
from ledger_service.domain.models import User
from ledger_service.domain.store import LedgerSession, LedgerStore

MAX_FIELD_LENGTH = 50

logger = logging.getLogger(__name__)


def _check_fields(first_name: str, last_name: str, email: str) -> None:
    for name, value in (("first_name", first_name), ("last_name", last_name), ("email", email)):
        if not value or len(value) > MAX_FIELD_LENGTH:
            raise InvalidRequestError(f"{name} must be 1-{MAX_FIELD_LENGTH} characters")


class UserService:
    """CRUD over account owners"""

    def __init__(self, store: LedgerStore):
        self.store = store

    def _run(self, work, action: str):
        try:
            return self.store.run_atomic(work)
        except StoreError as e:
            raise InternalError(f"Cannot {action}") from e

    def create_user(self, first_name: str, last_name: str, email: str) -> int:
        _check_fields(first_name, last_name, email)
        user = self._run(
            lambda session: session.users.add(first_name, last_name, email),
            "add user",
        )
        logger.info("User created", extra={"user_id": user.id})
        return user.id

    def get_user(self, user_id: int) -> User:
        user = self._run(lambda session: session.users.get(user_id), f"get user {user_id}")
        if user is None:
            raise NotFoundError(f"Cannot find user {user_id}")
        return user

    def update_user(self, user_id: int, first_name: str, last_name: str, email: str) -> User:
        _check_fields(first_name, last_name, email)

        def work(session: LedgerSession) -> User:
            if session.users.get(user_id) is None:
                raise NotFoundError(f"Cannot find user {user_id}")
            return session.users.update(user_id, first_name, last_name, email)

        return self._run(work, f"update user {user_id}")

    def delete_user(self, user_id: int) -> int:
        """Refused by the store (InternalError) while the user still owns accounts"""

        def work(session: LedgerSession) -> None:
            if session.users.get(user_id) is None:
                raise NotFoundError(f"Cannot find user {user_id}")
            session.users.delete(user_id)

        self._run(work, f"delete user {user_id}")
        logger.info("User deleted", extra={"user_id": user_id})
        return user_id
