"""Application service for quotes (devis).

Pricing runs fully in memory; the sale record, the quote and its tank lines
are then written in a single unit of work, so a failure leaves nothing
behind.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime, timedelta
from decimal import Decimal

from domain.client_service import register_client
from domain.exceptions import ClientIntrouvable, DevisIntrouvable
from domain.models import (
    TYPE_VENTE_PAR_DOSSIER,
    Chiffrage,
    DemandeDevis,
    Devis,
    StatutDevis,
    TypeDossier,
    Vente,
)
from domain.ports import CachePort
from domain.quote_totals import compute_totals, totals_from_snapshot
from domain.tariff_catalog import TariffCatalog
from domain.tariff_resolver import TariffResolver
from domain.validation import validate_demande

logger = logging.getLogger(__name__)

TAUX_TVA_TRANSPORT_DEFAUT = Decimal("0.19")


def generate_code_devis(date_devis: date, maintenant: datetime | None = None) -> str:
    """``DEV-<year>-<last 6 digits of the epoch milliseconds>``."""
    maintenant = maintenant or datetime.now()
    millis = int(maintenant.timestamp() * 1000)
    return f"DEV-{date_devis.year}-{millis % 1_000_000:06d}"


class DevisService:
    """Price, create, edit and read quotes."""

    def __init__(self, uow_factory, cache: CachePort | None = None, cache_ttl: int = 3600,
                 taux_tva_transport_defaut: Decimal = TAUX_TVA_TRANSPORT_DEFAUT) -> None:
        self._uow_factory = uow_factory
        self._cache = cache
        self._cache_ttl = cache_ttl
        self._taux_tva_transport_defaut = Decimal(taux_tva_transport_defaut)

    # ── Pricing ────────────────────────────────────────────────────────

    def _chiffrer(self, uow, demande: DemandeDevis) -> Chiffrage:
        resolver = TariffResolver(TariffCatalog(uow.tarifs, self._cache, self._cache_ttl))
        tarif_eau = resolver.resolve_service_tariff(demande.type_dossier, demande.date_devis)

        taux_transport = demande.taux_tva_transport
        if taux_transport is None and demande.type_dossier is TypeDossier.CITERNAGE:
            transport = resolver.resolve_transport_service(demande.date_devis)
            if transport is not None:
                taux_transport = transport.taux_tva
        if taux_transport is None:
            taux_transport = self._taux_tva_transport_defaut

        totaux = compute_totals(
            demande.lignes,
            tarif_eau.prix_ht,
            tarif_eau.taux_tva,
            taux_transport,
            resolver.transport_price_resolver(demande.prix_transport_defaut, demande.date_devis),
        )
        lignes = tuple(
            replace(
                ligne,
                id=None,
                prix_unitaire_m3_ht=tarif_eau.prix_ht,
                taux_tva_eau=tarif_eau.taux_tva,
                prix_transport_unitaire_ht=detail.prix_transport_unitaire_ht,
                taux_tva_transport=taux_transport,
            )
            for ligne, detail in zip(demande.lignes, totaux.lignes)
        )
        return Chiffrage(
            tarif_eau=tarif_eau,
            taux_tva_transport=taux_transport,
            lignes=lignes,
            totaux=totaux,
        )

    def simuler(self, demande: DemandeDevis) -> Chiffrage:
        """Price a quote without writing anything."""
        validate_demande(demande)
        with self._uow_factory() as uow:
            return self._chiffrer(uow, demande)

    # ── Commands ───────────────────────────────────────────────────────

    def creer(self, demande: DemandeDevis) -> Devis:
        """Create the client if needed, then the sale, the quote and its lines."""
        validate_demande(demande)
        with self._uow_factory() as uow:
            client_id = self._resolve_client(uow, demande)
            chiffrage = self._chiffrer(uow, demande)
            vente = Vente(
                client_id=client_id,
                type_dossier=TYPE_VENTE_PAR_DOSSIER[demande.type_dossier],
                date_vente=demande.date_devis,
                lignes=list(chiffrage.lignes),
            )
            devis = uow.devis.add(
                Devis(
                    code_devis=self._code_libre(uow, demande.date_devis),
                    vente=vente,
                    statut=demande.statut,
                    notes=demande.notes,
                    totaux=chiffrage.totaux,
                )
            )
            uow.commit()
        logger.info(
            "Devis %s créé pour le client %s: %s TTC",
            devis.code_devis, client_id, chiffrage.totaux.total_ttc,
        )
        return devis

    def modifier(self, devis_id: int, demande: DemandeDevis) -> Devis:
        """Re-price a quote; its lines are replaced wholesale."""
        validate_demande(demande)
        with self._uow_factory() as uow:
            devis = uow.devis.get(devis_id)
            if devis is None:
                raise DevisIntrouvable(devis_id)
            client_id = self._resolve_client(uow, demande)
            chiffrage = self._chiffrer(uow, demande)
            devis.vente = replace(
                devis.vente,
                client_id=client_id,
                type_dossier=TYPE_VENTE_PAR_DOSSIER[demande.type_dossier],
                date_vente=demande.date_devis,
                lignes=list(chiffrage.lignes),
            )
            devis.statut = demande.statut
            devis.notes = demande.notes
            devis.totaux = chiffrage.totaux
            devis = uow.devis.update(devis)
            uow.commit()
        logger.info("Devis %s modifié", devis.code_devis)
        return devis

    def changer_statut(self, devis_id: int, statut: StatutDevis) -> Devis:
        with self._uow_factory() as uow:
            devis = uow.devis.get(devis_id)
            if devis is None:
                raise DevisIntrouvable(devis_id)
            devis.statut = statut
            devis = uow.devis.update(devis)
            uow.commit()
        logger.info("Devis %s passé au statut %s", devis.code_devis, statut.value)
        return devis

    def supprimer(self, devis_id: int) -> int:
        """Delete a quote with its sale record and lines. Returns the deleted id."""
        with self._uow_factory() as uow:
            if not uow.devis.delete(devis_id):
                raise DevisIntrouvable(devis_id)
            uow.commit()
        logger.info("Devis %s supprimé", devis_id)
        return devis_id

    # ── Queries ────────────────────────────────────────────────────────

    def lister(self) -> list[Devis]:
        """All quotes, newest first, with their stored totals."""
        with self._uow_factory() as uow:
            return uow.devis.list_all()

    def obtenir(self, devis_id: int) -> Devis:
        """Read a quote; totals are recomputed from the line snapshots."""
        with self._uow_factory() as uow:
            devis = uow.devis.get(devis_id)
        if devis is None:
            raise DevisIntrouvable(devis_id)
        return replace(devis, totaux=totals_from_snapshot(devis.vente.lignes))

    # ── Internal helpers ───────────────────────────────────────────────

    @staticmethod
    def _code_libre(uow, date_devis: date) -> str:
        """First unused quote code from now on, stepping one millisecond."""
        maintenant = datetime.now()
        code = generate_code_devis(date_devis, maintenant)
        while uow.devis.get_by_code(code) is not None:
            maintenant += timedelta(milliseconds=1)
            code = generate_code_devis(date_devis, maintenant)
        return code

    @staticmethod
    def _resolve_client(uow, demande: DemandeDevis) -> int:
        if demande.nouveau_client is not None:
            return register_client(uow, demande.nouveau_client).id
        if uow.clients.get(demande.client_id) is None:
            raise ClientIntrouvable(demande.client_id)
        return demande.client_id
