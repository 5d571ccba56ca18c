"""Shared fixtures: in-memory repositories and a matching unit of work."""

from __future__ import annotations

import copy
import itertools

import pytest

from domain.ports import ClientRepository, DevisRepository, TarifRepository, UnitOfWork


class FakeTarifRepository(TarifRepository):
    def __init__(self, tarifs=()):
        self._rows = {}
        self._ids = itertools.count(1)
        for tarif in tarifs:
            self.save(tarif)

    def list_all(self):
        return [copy.copy(t) for t in self._rows.values()]

    def get(self, tarif_id):
        tarif = self._rows.get(tarif_id)
        return copy.copy(tarif) if tarif else None

    def save(self, tarif):
        if tarif.id is None:
            tarif.id = next(self._ids)
        self._rows[tarif.id] = copy.copy(tarif)
        return tarif

    def delete(self, tarif_id):
        return self._rows.pop(tarif_id, None) is not None


class FakeClientRepository(ClientRepository):
    def __init__(self):
        self._rows = {}
        self._ids = itertools.count(1)

    def list_all(self):
        return list(self._rows.values())

    def get(self, client_id):
        return self._rows.get(client_id)

    def find_by_code(self, code_client):
        return next((c for c in self._rows.values() if c.code_client == code_client), None)

    def save(self, client):
        if client.id is None:
            client.id = next(self._ids)
        self._rows[client.id] = client
        return client


class FakeDevisRepository(DevisRepository):
    def __init__(self):
        self._rows = {}
        self._ids = itertools.count(1)

    def add(self, devis):
        devis.id = next(self._ids)
        devis.vente.id = devis.id
        self._rows[devis.id] = copy.deepcopy(devis)
        return devis

    def get(self, devis_id):
        devis = self._rows.get(devis_id)
        return copy.deepcopy(devis) if devis else None

    def get_by_code(self, code_devis):
        return next((copy.deepcopy(d) for d in self._rows.values() if d.code_devis == code_devis), None)

    def list_all(self):
        return [copy.deepcopy(d) for _id, d in sorted(self._rows.items(), reverse=True)]

    def update(self, devis):
        self._rows[devis.id] = copy.deepcopy(devis)
        return devis

    def delete(self, devis_id):
        return self._rows.pop(devis_id, None) is not None


class FakeUnitOfWork(UnitOfWork):
    """Shares repositories across instances; counts commits."""

    def __init__(self, tarifs=None, clients=None, devis=None):
        self.tarifs = tarifs or FakeTarifRepository()
        self.clients = clients or FakeClientRepository()
        self.devis = devis or FakeDevisRepository()
        self.commits = 0

    def __call__(self):
        return self

    def commit(self):
        self.commits += 1

    def rollback(self):
        pass


@pytest.fixture
def fake_uow():
    return FakeUnitOfWork()


@pytest.fixture
def config(tmp_path):
    from gestion_eau.config import DEFAULTS

    config = copy.deepcopy(DEFAULTS)
    config["database"]["url"] = f"sqlite:///{tmp_path / 'gestion_eau.db'}"
    return config


@pytest.fixture
def app(config):
    """Application wired on a throw-away SQLite file and an in-memory cache."""
    from gestion_eau.adapters.outbound.redis_cache import InMemoryCacheAdapter
    from gestion_eau.app import build_application

    application = build_application(config, cache=InMemoryCacheAdapter())
    yield application
    application.engine.dispose()
