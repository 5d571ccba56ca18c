"""Tariff catalog — versioned price/tax records per service type.

Reads go through an optional CachePort. The catalog is read-only; writers
call ``invalidate()`` once their transaction is committed.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from domain.models import Tarif
from domain.normalization import normalize_service_type
from domain.ports import CachePort, TarifRepository

CACHE_PREFIX = "tarifs:"
CACHE_KEY_ALL = f"{CACHE_PREFIX}all"


def tarifs_actifs(tarifs, type_prestation, maintenant=None):
    """Return the tariffs of *type_prestation* active at *maintenant*."""
    cible = normalize_service_type(type_prestation)
    return [
        t for t in tarifs
        if normalize_service_type(t.type_prestation) == cible
        and t.est_actif(maintenant)
    ]


def plus_recent(tarifs):
    """Pick the tariff with the latest date_debut, ties broken by highest id."""
    if not tarifs:
        return None
    return max(tarifs, key=lambda t: (t.date_debut, t.id if t.id is not None else -1))


class TariffCatalog:
    """Answers "what is the active tariff for type X at date D"."""

    def __init__(self, repository: TarifRepository, cache: CachePort | None = None,
                 cache_ttl: int = 3600) -> None:
        self._repository = repository
        self._cache = cache
        self._cache_ttl = cache_ttl

    # ── Queries ────────────────────────────────────────────────────────

    def list_all(self) -> list[Tarif]:
        """All tariffs, active or not, newest date_debut first."""
        if self._cache is not None:
            cached = self._cache.get(CACHE_KEY_ALL)
            if cached is not None:
                return [_from_cache(row) for row in cached]
        tarifs = sorted(
            self._repository.list_all(),
            key=lambda t: (t.date_debut, t.id or 0),
            reverse=True,
        )
        if self._cache is not None:
            self._cache.set(
                CACHE_KEY_ALL, [_to_cache(t) for t in tarifs], ttl=self._cache_ttl
            )
        return tarifs

    def actifs(self, type_prestation: str, maintenant: date | None = None) -> list[Tarif]:
        return tarifs_actifs(self.list_all(), type_prestation, maintenant)

    def tarif_actif(self, type_prestation: str, maintenant: date | None = None) -> Tarif | None:
        """The most recent active tariff of a service type, or None."""
        return plus_recent(self.actifs(type_prestation, maintenant))

    def get(self, tarif_id: int) -> Tarif | None:
        return self._repository.get(tarif_id)

    # ── Cache ──────────────────────────────────────────────────────────

    def invalidate(self) -> None:
        """Drop the cached list; call after every committed tariff write."""
        if self._cache is not None:
            self._cache.invalidate(CACHE_PREFIX)


def _to_cache(tarif: Tarif) -> dict:
    return {
        "id": tarif.id,
        "type_prestation": tarif.type_prestation,
        "prix_ht": str(tarif.prix_ht),
        "taux_tva": str(tarif.taux_tva),
        "volume_reference": tarif.volume_reference,
        "date_debut": tarif.date_debut.isoformat(),
        "date_fin": tarif.date_fin.isoformat() if tarif.date_fin else None,
    }


def _from_cache(row: dict) -> Tarif:
    return Tarif(
        id=row["id"],
        type_prestation=row["type_prestation"],
        prix_ht=Decimal(row["prix_ht"]),
        taux_tva=Decimal(row["taux_tva"]),
        volume_reference=row["volume_reference"],
        date_debut=date.fromisoformat(row["date_debut"]),
        date_fin=date.fromisoformat(row["date_fin"]) if row["date_fin"] else None,
    )
