"""Duplicate tariff guard — pure domain logic, zero external dependencies.

At most one active tariff per service type, or per (TRANSPORT, reference
volume) where two missing reference volumes are equal.
"""

from __future__ import annotations

from datetime import date

from domain.exceptions import TarifEnDoublon
from domain.models import Tarif, TypePrestation
from domain.normalization import normalize_service_type
from domain.ports import TarifRepository

_TRANSPORT = TypePrestation.TRANSPORT.value


def is_conflict(candidat: Tarif, existant: Tarif, maintenant: date | None = None) -> bool:
    """True when *existant* is active and covers the same slot as *candidat*."""
    type_candidat = normalize_service_type(candidat.type_prestation)
    if normalize_service_type(existant.type_prestation) != type_candidat:
        return False
    if not existant.est_actif(maintenant):
        return False
    if type_candidat == _TRANSPORT:
        return existant.volume_reference == candidat.volume_reference
    return True


def find_conflict(candidat: Tarif, tarifs: list[Tarif], exclude_id: int | None = None,
                  maintenant: date | None = None) -> Tarif | None:
    """Return the first existing tariff that collides with *candidat*, or None."""
    for tarif in tarifs:
        if exclude_id is not None and tarif.id == exclude_id:
            continue
        if is_conflict(candidat, tarif, maintenant):
            return tarif
    return None


class DuplicateTariffGuard:
    """Read-only check run before any tariff insert or update."""

    def __init__(self, repository: TarifRepository) -> None:
        self._repository = repository

    def find_conflict(self, candidat: Tarif, exclude_id: int | None = None,
                      maintenant: date | None = None) -> Tarif | None:
        return find_conflict(candidat, self._repository.list_all(), exclude_id, maintenant)

    def ensure_no_conflict(self, candidat: Tarif, exclude_id: int | None = None,
                           maintenant: date | None = None) -> None:
        """Raise TarifEnDoublon naming the conflicting tariff, if any."""
        conflit = self.find_conflict(candidat, exclude_id, maintenant)
        if conflit is not None:
            raise TarifEnDoublon(conflit.id, normalize_service_type(candidat.type_prestation))
