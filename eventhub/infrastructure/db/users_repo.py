from __future__ import annotations

from typing import Literal, Optional

import psycopg
from psycopg import errors as pg_errors

from eventhub.domain.entities import User
from eventhub.domain.errors import UserAlreadyExists, UserNotFound
from eventhub.domain.ports.user_repository import UserRepositoryPort

_USER_COLUMNS = (
    "id, name, email, role, is_verified, avatar, github_id, google_id, "
    "created_at, updated_at"
)

_PROVIDER_COLUMNS = {"github": "github_id", "google": "google_id"}


def _row_to_user(row: tuple) -> User:
    (
        id_,
        name,
        email,
        role,
        is_verified,
        avatar,
        github_id,
        google_id,
        created_at,
        updated_at,
    ) = row
    return User(
        id=str(id_),
        name=name or "",
        email=str(email),
        role=role,
        is_verified=bool(is_verified),
        avatar=avatar,
        github_id=github_id,
        google_id=google_id,
        created_at=created_at,
        updated_at=updated_at,
    )


class PgUserRepository(UserRepositoryPort):
    """
    Postgres implementation of UserRepositoryPort.

    NOTE:
    - This repo is constructed with an *active async connection* supplied by the UoW.
    - It does not commit; the UnitOfWork controls the transaction boundary.
    - Emails are stored normalized; lookups normalize with LOWER(TRIM(...)) too.
    """

    def __init__(self, conn: psycopg.AsyncConnection) -> None:
        self._conn = conn

    async def create(
        self,
        *,
        name: str,
        email: str,
        password_hash: str,
        is_verified: bool = False,
        avatar: str | None = None,
        github_id: str | None = None,
        google_id: str | None = None,
    ) -> User:
        sql = f"""
        INSERT INTO users
            (name, email, password_hash, is_verified, avatar, github_id, google_id)
        VALUES (%s, LOWER(TRIM(%s)), %s, %s, %s, %s, %s)
        RETURNING {_USER_COLUMNS}
        """
        params = (
            name,
            email,
            password_hash,
            is_verified,
            avatar,
            github_id,
            google_id,
        )
        try:
            # savepoint so a duplicate doesn't poison the caller's transaction
            async with self._conn.transaction():
                async with self._conn.cursor() as cur:
                    await cur.execute(sql, params)
                    row = await cur.fetchone()
        except pg_errors.UniqueViolation as e:
            raise UserAlreadyExists() from e

        if not row:
            raise RuntimeError("insert into users returned no row")
        return _row_to_user(row)

    async def get_by_id(self, user_id: str) -> Optional[User]:
        sql = f"SELECT {_USER_COLUMNS} FROM users WHERE id = %s"
        async with self._conn.cursor() as cur:
            await cur.execute(sql, (user_id,))
            row = await cur.fetchone()
        return _row_to_user(row) if row else None

    async def get_by_email(self, email: str) -> Optional[User]:
        sql = f"SELECT {_USER_COLUMNS} FROM users WHERE email = LOWER(TRIM(%s))"
        async with self._conn.cursor() as cur:
            await cur.execute(sql, (email,))
            row = await cur.fetchone()
        return _row_to_user(row) if row else None

    async def get_by_email_with_hash(self, email: str) -> Optional[tuple[User, str]]:
        sql = f"""
        SELECT {_USER_COLUMNS}, password_hash
        FROM users
        WHERE email = LOWER(TRIM(%s))
        """
        async with self._conn.cursor() as cur:
            await cur.execute(sql, (email,))
            row = await cur.fetchone()
        if not row:
            return None
        return _row_to_user(row[:-1]), row[-1]

    async def set_verified(self, user_id: str) -> None:
        await self._update_one(
            "UPDATE users SET is_verified = TRUE, updated_at = now() WHERE id = %s",
            (user_id,),
        )

    async def set_password_hash(self, user_id: str, password_hash: str) -> None:
        await self._update_one(
            "UPDATE users SET password_hash = %s, updated_at = now() WHERE id = %s",
            (password_hash, user_id),
        )

    async def link_social(
        self,
        user_id: str,
        *,
        provider: Literal["github", "google"],
        provider_id: str,
        avatar: str | None = None,
    ) -> User:
        column = _PROVIDER_COLUMNS[provider]
        sql = f"""
        UPDATE users
        SET {column} = %s,
            is_verified = TRUE,
            avatar = COALESCE(avatar, %s),
            updated_at = now()
        WHERE id = %s
        RETURNING {_USER_COLUMNS}
        """
        async with self._conn.cursor() as cur:
            await cur.execute(sql, (provider_id, avatar, user_id))
            row = await cur.fetchone()
        if not row:
            raise UserNotFound()
        return _row_to_user(row)

    async def _update_one(self, sql: str, params: tuple) -> None:
        async with self._conn.cursor() as cur:
            await cur.execute(sql, params)
            if cur.rowcount == 0:
                raise UserNotFound()
