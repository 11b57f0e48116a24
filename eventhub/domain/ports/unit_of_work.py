from __future__ import annotations

from types import TracebackType
from typing import Protocol, Type

from eventhub.domain.ports.user_repository import UserRepositoryPort


class UnitOfWorkPort(Protocol):
    """
    Transaction boundary around the user store.

        async with uow as tx:
            user = await tx.db_users.get_by_email(email)
            await tx.db_users.set_verified(user.id)
            await tx.commit()

    Leaving the block without `commit()` discards the work. Read-only
    blocks simply never commit.
    """

    db_users: UserRepositoryPort

    async def __aenter__(self) -> "UnitOfWorkPort": ...

    async def __aexit__(
        self,
        exc_type: Type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None: ...

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...
