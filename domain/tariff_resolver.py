"""Tariff resolution for quotes.

Maps a dossier type to its service type and resolves the applicable unit
price and tax rate. Service tariffs are mandatory; transport prices fall back
softly to a caller-supplied default.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from domain.exceptions import TarifIntrouvable
from domain.models import (
    PRESTATION_PAR_DOSSIER,
    PrixTransport,
    TarifResolu,
    TypeDossier,
    TypePrestation,
)
from domain.normalization import round_price, round_rate, to_decimal
from domain.tariff_catalog import TariffCatalog, plus_recent

logger = logging.getLogger(__name__)


def prestation_pour_dossier(type_dossier) -> TypePrestation | None:
    """Service type for a dossier type (enum or raw code), None if unknown."""
    if isinstance(type_dossier, TypeDossier):
        return PRESTATION_PAR_DOSSIER[type_dossier]
    try:
        return PRESTATION_PAR_DOSSIER[TypeDossier(str(type_dossier).strip().upper())]
    except ValueError:
        return None


def select_transport_tariff(tarifs_transport, volume):
    """Bracket lookup among active TRANSPORT tariffs.

    Returns ``(tarif, source)`` where source is ``"tranche"`` (volume inside
    a bracket), ``"plafond"`` (above every bracket, highest one applies) or
    ``"general"`` (catch-all without reference volume); ``(None, None)`` when
    nothing applies.
    """
    tranches = sorted(
        (t for t in tarifs_transport if t.volume_reference is not None),
        key=lambda t: t.volume_reference,
    )
    generaux = [t for t in tarifs_transport if t.volume_reference is None]

    # Brackets are [1, ref1], [ref1 + 1, ref2], ...; a fractional volume
    # between two of them matches none and falls through to the catch-all.
    for i, tarif in enumerate(tranches):
        borne_inf = 1 if i == 0 else tranches[i - 1].volume_reference + 1
        borne_sup = tarif.volume_reference
        if borne_inf <= volume <= borne_sup:
            return tarif, "tranche"

    if tranches and volume > tranches[-1].volume_reference:
        return tranches[-1], "plafond"

    if generaux:
        return plus_recent(generaux), "general"
    return None, None


class TariffResolver:
    """Resolves service and transport tariffs against a TariffCatalog."""

    def __init__(self, catalog: TariffCatalog) -> None:
        self._catalog = catalog

    def resolve_service_tariff(self, type_dossier, date_ref: date | None = None) -> TarifResolu:
        """Active tariff of the dossier's service type.

        Raises TarifIntrouvable for an unknown dossier type or when no tariff
        of that service type is active at *date_ref*.
        """
        prestation = prestation_pour_dossier(type_dossier)
        if prestation is None:
            raise TarifIntrouvable(str(type_dossier))
        return self.resolve_prestation(prestation, date_ref)

    def resolve_prestation(self, prestation: TypePrestation,
                           date_ref: date | None = None) -> TarifResolu:
        tarif = self._catalog.tarif_actif(prestation.value, date_ref)
        if tarif is None:
            raise TarifIntrouvable(prestation.value)
        return TarifResolu(
            type_prestation=prestation,
            prix_ht=round_price(tarif.prix_ht),
            taux_tva=round_rate(tarif.taux_tva),
            tarif_id=tarif.id,
        )

    def resolve_transport_service(self, date_ref: date | None = None) -> TarifResolu | None:
        """Secondary TRANSPORT lookup done for CITERNAGE dossiers; None if absent."""
        try:
            return self.resolve_prestation(TypePrestation.TRANSPORT, date_ref)
        except TarifIntrouvable:
            logger.info("Aucun tarif TRANSPORT actif au %s", date_ref or date.today())
            return None

    def resolve_transport_price(self, volume, prix_defaut=Decimal("0"),
                                date_ref: date | None = None) -> PrixTransport:
        """Transport unit price for one tank of *volume* m³."""
        actifs = self._catalog.actifs(TypePrestation.TRANSPORT.value, date_ref)
        tarif, source = select_transport_tariff(actifs, to_decimal(volume))
        if tarif is not None:
            return PrixTransport(
                prix_ht=round_price(tarif.prix_ht),
                source=source,
                volume_reference=tarif.volume_reference,
                tarif_id=tarif.id,
            )
        defaut = to_decimal(prix_defaut) or Decimal("0")
        logger.warning(
            "Aucun tarif TRANSPORT pour %s m3, prix par défaut utilisé: %s",
            volume, defaut,
        )
        return PrixTransport(prix_ht=round_price(defaut), source="defaut")

    def transport_price_resolver(self, prix_defaut=Decimal("0"), date_ref: date | None = None):
        """Callable volume -> unit price, for the totals calculator."""
        actifs = self._catalog.actifs(TypePrestation.TRANSPORT.value, date_ref)
        defaut = round_price(to_decimal(prix_defaut) or Decimal("0"))

        def _resolver(volume):
            tarif, _source = select_transport_tariff(actifs, to_decimal(volume))
            if tarif is None:
                logger.warning(
                    "Aucun tarif TRANSPORT pour %s m3, prix par défaut utilisé: %s",
                    volume, defaut,
                )
                return defaut
            return round_price(tarif.prix_ht)

        return _resolver
