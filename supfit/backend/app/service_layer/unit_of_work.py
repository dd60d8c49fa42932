# app/service_layer/unit_of_work.py
from __future__ import annotations

import logging
from typing import Callable

from sqlalchemy.ext.asyncio import AsyncSession

from ..adapters.sqlalchemy_repos import SqlAlchemyRepos
from ..db import AsyncSessionLocal

log = logging.getLogger(__name__)

SessionFactory = Callable[[], AsyncSession]


class SqlAlchemyUnitOfWork:
    """
    One transaction per `async with` block.

    The block commits when it exits cleanly and rolls back when it raises;
    either way the session is closed and the repos are dropped, so a UoW
    instance can be entered again for a fresh transaction.
    """

    def __init__(self, session_factory: SessionFactory | None = None) -> None:
        self._factory = session_factory or AsyncSessionLocal
        self.session: AsyncSession | None = None
        self.repos: SqlAlchemyRepos | None = None

    async def __aenter__(self) -> "SqlAlchemyUnitOfWork":
        self.session = self._factory()
        self.repos = SqlAlchemyRepos(self.session)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        session = self.session
        assert session is not None
        try:
            if exc_type is None:
                await session.commit()
            else:
                log.debug("unit of work rolled back: %s", exc_type.__name__)
                await session.rollback()
        finally:
            await session.close()
            self.session = None
            self.repos = None
