"""Composition root: wires configuration, database, cache and services."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from gestion_eau.adapters.outbound.redis_cache import build_cache
from gestion_eau.adapters.outbound.sqlalchemy_uow import uow_factory
from gestion_eau.config import load_config
from gestion_eau.data.db import check_connection, get_engine, get_session_factory, init_db
from domain.client_service import ClientService
from domain.devis_service import DevisService
from domain.normalization import normalize_tax_rate
from domain.tarif_service import TarifService

logger = logging.getLogger(__name__)


@dataclass
class Application:
    config: dict
    engine: object
    tarifs: TarifService
    clients: ClientService
    devis: DevisService

    def is_healthy(self) -> bool:
        return check_connection(self.engine)


def configure_logging(config: dict) -> None:
    level = str(config.get("logging", {}).get("level", "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_application(config: dict | None = None, engine=None, cache=None) -> Application:
    """Build every service from *config* (loaded from config.yaml when omitted)."""
    config = config or load_config()
    if engine is None:
        engine = get_engine(config["database"]["url"])
    init_db(engine)
    if cache is None:
        cache = build_cache(config["cache"].get("redis_url"))
    ttl = int(config["cache"].get("ttl") or 3600)
    factory = uow_factory(get_session_factory(engine))
    taux_defaut = normalize_tax_rate(config["tarification"]["taux_tva_transport_defaut"])

    logger.debug("Application construite sur %s", engine.url)
    return Application(
        config=config,
        engine=engine,
        tarifs=TarifService(factory, cache=cache, cache_ttl=ttl),
        clients=ClientService(factory),
        devis=DevisService(
            factory, cache=cache, cache_ttl=ttl, taux_tva_transport_defaut=taux_defaut
        ),
    )
