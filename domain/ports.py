"""Domain ports — abstract interfaces for repositories and infrastructure.

Only stdlib (abc) and domain.models imports allowed.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from domain.models import Client, Devis, Tarif


# ── Repository Ports ──────────────────────────────────────────────────────


class TarifRepository(ABC):
    """Persistence port for tariffs (Tarifs_Historique)."""

    @abstractmethod
    def list_all(self) -> list[Tarif]: ...

    @abstractmethod
    def get(self, tarif_id: int) -> Tarif | None: ...

    @abstractmethod
    def save(self, tarif: Tarif) -> Tarif: ...

    @abstractmethod
    def delete(self, tarif_id: int) -> bool: ...


class ClientRepository(ABC):
    """Persistence port for clients."""

    @abstractmethod
    def list_all(self) -> list[Client]: ...

    @abstractmethod
    def get(self, client_id: int) -> Client | None: ...

    @abstractmethod
    def find_by_code(self, code_client: str) -> Client | None: ...

    @abstractmethod
    def save(self, client: Client) -> Client: ...


class DevisRepository(ABC):
    """Persistence port for quotes, their sale record and tank lines."""

    @abstractmethod
    def add(self, devis: Devis) -> Devis: ...

    @abstractmethod
    def get(self, devis_id: int) -> Devis | None: ...

    @abstractmethod
    def get_by_code(self, code_devis: str) -> Devis | None: ...

    @abstractmethod
    def list_all(self) -> list[Devis]: ...

    @abstractmethod
    def update(self, devis: Devis) -> Devis: ...

    @abstractmethod
    def delete(self, devis_id: int) -> bool:
        """Remove the quote, its sale record and its lines; False if absent."""


class UnitOfWork(ABC):
    """Transaction boundary grouping the repositories of one request.

    Used as a context manager: leaving the block without ``commit()`` (or
    with an exception) rolls everything back.
    """

    tarifs: TarifRepository
    clients: ClientRepository
    devis: DevisRepository

    def __enter__(self) -> UnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.rollback()

    @abstractmethod
    def commit(self) -> None: ...

    @abstractmethod
    def rollback(self) -> None: ...


# ── Infrastructure Ports ──────────────────────────────────────────────────


class CachePort(ABC):
    """Port for key-value caching (Redis, in-memory, etc.)."""

    @abstractmethod
    def get(self, key: str) -> object | None: ...

    @abstractmethod
    def set(self, key: str, value: object, ttl: int = 3600) -> None: ...

    @abstractmethod
    def invalidate(self, prefix: str) -> None: ...
