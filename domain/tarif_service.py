"""Application service for tariff administration.

Every write normalizes its input, validates it, runs the duplicate guard
against the other tariffs and commits in one unit of work.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date

from domain.duplicate_guard import DuplicateTariffGuard
from domain.exceptions import TarifEnDoublon, TarifInexistant, ValidationError
from domain.models import Tarif
from domain.normalization import (
    normalize_service_type,
    normalize_tax_rate,
    round_price,
    to_decimal,
)
from domain.ports import CachePort
from domain.tariff_catalog import TariffCatalog
from domain.validation import validate_tarif

logger = logging.getLogger(__name__)


def normalize_tarif(tarif: Tarif) -> Tarif:
    """Return a copy with storage-ready values.

    Type trimmed and uppercased, price rounded to 2 decimals, tax rate run
    through the percentage heuristic, date_debut defaulting to today.
    """
    prix = to_decimal(tarif.prix_ht)
    taux = normalize_tax_rate(tarif.taux_tva)
    return replace(
        tarif,
        type_prestation=normalize_service_type(tarif.type_prestation),
        prix_ht=round_price(prix) if prix is not None else None,
        taux_tva=taux,
        date_debut=tarif.date_debut or date.today(),
    )


class TarifService:
    """Create, edit, close and delete tariffs."""

    def __init__(self, uow_factory, cache: CachePort | None = None, cache_ttl: int = 3600) -> None:
        self._uow_factory = uow_factory
        self._cache = cache
        self._cache_ttl = cache_ttl

    def _catalog(self, uow) -> TariffCatalog:
        return TariffCatalog(uow.tarifs, self._cache, self._cache_ttl)

    def lister(self) -> list[Tarif]:
        """All tariffs, newest date_debut first."""
        with self._uow_factory() as uow:
            return self._catalog(uow).list_all()

    def creer(self, tarif: Tarif) -> Tarif:
        """Insert a new tariff.

        Raises ValidationError or TarifEnDoublon.
        """
        if tarif.id is not None:
            raise ValidationError("id", "Un nouveau tarif ne peut pas porter d'identifiant")
        candidat = normalize_tarif(tarif)
        validate_tarif(candidat)
        with self._uow_factory() as uow:
            self._ensure_unique(uow, candidat)
            saved = uow.tarifs.save(candidat)
            uow.commit()
        self._catalog(uow).invalidate()
        logger.info(
            "Tarif %s créé: %s %s HT (volume ref %s)",
            saved.id, saved.type_prestation, saved.prix_ht, saved.volume_reference,
        )
        return saved

    def modifier(self, tarif_id: int, tarif: Tarif) -> Tarif:
        """Replace the fields of an existing tariff.

        The duplicate check ignores the tariff being edited. An absent
        date_fin keeps the stored one, which must still follow date_debut.
        """
        candidat = normalize_tarif(tarif)
        validate_tarif(candidat)
        with self._uow_factory() as uow:
            existant = uow.tarifs.get(tarif_id)
            if existant is None:
                raise TarifInexistant(tarif_id)
            candidat = replace(
                candidat,
                id=tarif_id,
                date_fin=candidat.date_fin or existant.date_fin,
            )
            if candidat.date_fin is not None and candidat.date_fin < candidat.date_debut:
                raise ValidationError("date_fin", "La date de fin précède la date de début")
            self._ensure_unique(uow, candidat, exclude_id=tarif_id)
            saved = uow.tarifs.save(candidat)
            uow.commit()
        self._catalog(uow).invalidate()
        logger.info("Tarif %s mis à jour", tarif_id)
        return saved

    def cloturer(self, tarif_id: int, date_fin: date | None = None) -> Tarif:
        """Logical delete: set date_fin (today by default)."""
        with self._uow_factory() as uow:
            existant = uow.tarifs.get(tarif_id)
            if existant is None:
                raise TarifInexistant(tarif_id)
            fin = date_fin or date.today()
            if fin < existant.date_debut:
                raise ValidationError("date_fin", "La date de fin précède la date de début")
            saved = uow.tarifs.save(replace(existant, date_fin=fin))
            uow.commit()
        self._catalog(uow).invalidate()
        logger.info("Tarif %s clôturé au %s", tarif_id, fin)
        return saved

    def supprimer(self, tarif_id: int) -> int:
        """Hard delete. Returns the deleted id."""
        with self._uow_factory() as uow:
            if not uow.tarifs.delete(tarif_id):
                raise TarifInexistant(tarif_id)
            uow.commit()
        self._catalog(uow).invalidate()
        logger.info("Tarif %s supprimé", tarif_id)
        return tarif_id

    @staticmethod
    def _ensure_unique(uow, candidat: Tarif, exclude_id: int | None = None) -> None:
        try:
            DuplicateTariffGuard(uow.tarifs).ensure_no_conflict(candidat, exclude_id)
        except TarifEnDoublon as exc:
            logger.warning("Tarif en doublon refusé: %s", exc)
            raise
