"""Application service for clients."""

from __future__ import annotations

import logging
from dataclasses import replace

from domain.exceptions import ClientEnDoublon, ClientIntrouvable
from domain.models import Client
from domain.validation import validate_client

logger = logging.getLogger(__name__)


def normalize_client(client: Client) -> Client:
    """Trim text fields; empty optional fields become None."""
    return replace(
        client,
        code_client=(client.code_client or "").strip(),
        nom_raison_sociale=(client.nom_raison_sociale or "").strip(),
        adresse=(client.adresse or "").strip(),
        telephone=(client.telephone or "").strip() or None,
        email=(client.email or "").strip() or None,
    )


def register_client(uow, client: Client) -> Client:
    """Validate and insert a client inside an open unit of work (no commit)."""
    client = normalize_client(client)
    validate_client(client)
    if uow.clients.find_by_code(client.code_client) is not None:
        raise ClientEnDoublon(client.code_client)
    return uow.clients.save(client)


class ClientService:
    def __init__(self, uow_factory) -> None:
        self._uow_factory = uow_factory

    def lister(self) -> list[Client]:
        """All clients ordered by name."""
        with self._uow_factory() as uow:
            return sorted(uow.clients.list_all(), key=lambda c: c.nom_raison_sociale.casefold())

    def obtenir(self, client_id: int) -> Client:
        with self._uow_factory() as uow:
            client = uow.clients.get(client_id)
        if client is None:
            raise ClientIntrouvable(client_id)
        return client

    def creer(self, client: Client) -> Client:
        with self._uow_factory() as uow:
            saved = register_client(uow, client)
            uow.commit()
        logger.info("Client %s créé (%s)", saved.id, saved.code_client)
        return saved
