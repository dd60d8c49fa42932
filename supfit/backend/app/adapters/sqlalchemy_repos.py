# app/adapters/sqlalchemy_repos.py
from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from .repos.audit import AuditRepository
from .repos.locations import LocationRepository
from .repos.professionals import ProfessionalRepository
from .repos.weights import WeightConfigRepository


class SqlAlchemyRepos:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.weights = WeightConfigRepository(session)
        self.locations = LocationRepository(session)
        self.professionals = ProfessionalRepository(session)
        self.audit = AuditRepository(session)
