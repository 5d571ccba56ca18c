"""SQLAlchemy adapter for the UnitOfWork port.

One Session per unit of work; every repository shares it, so a single
commit covers the sale, the quote and all of its lines.
"""

from __future__ import annotations

from sqlalchemy.orm import sessionmaker

from gestion_eau.adapters.outbound.sqlalchemy_repos import (
    SqlAlchemyClientRepository,
    SqlAlchemyDevisRepository,
    SqlAlchemyTarifRepository,
)
from domain.ports import UnitOfWork


class SqlAlchemyUnitOfWork(UnitOfWork):
    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory
        self._session = None

    def __enter__(self) -> SqlAlchemyUnitOfWork:
        self._session = self._session_factory()
        self.tarifs = SqlAlchemyTarifRepository(self._session)
        self.clients = SqlAlchemyClientRepository(self._session)
        self.devis = SqlAlchemyDevisRepository(self._session)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            super().__exit__(exc_type, exc, tb)
        finally:
            self._session.close()

    def commit(self) -> None:
        self._session.commit()

    def rollback(self) -> None:
        self._session.rollback()


def uow_factory(session_factory: sessionmaker):
    """Return a zero-argument callable building fresh units of work."""
    return lambda: SqlAlchemyUnitOfWork(session_factory)
