"""Domain models — pure Python, zero external dependencies.

Only stdlib imports allowed: dataclasses, datetime, decimal, enum.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

ZERO = Decimal("0")


class TypePrestation(Enum):
    """Service type a tariff is attached to."""

    CITERNAGE = "CITERNAGE"
    TRANSPORT = "TRANSPORT"
    VOL = "VOL"
    ESSAI = "ESSAI"


class TypeDossier(Enum):
    """User-facing dossier type of a quote."""

    CITERNAGE = "CITERNAGE"
    PROCES_VOL = "PROCES_VOL"
    ESSAI_RESEAU = "ESSAI_RESEAU"


class StatutDevis(Enum):
    """Status of a quote."""

    EN_ATTENTE = "EN ATTENTE"
    ACCEPTE = "ACCEPTE"
    REFUSE = "REFUSE"


# Dossier type -> service type used for tariff lookup
PRESTATION_PAR_DOSSIER = {
    TypeDossier.CITERNAGE: TypePrestation.CITERNAGE,
    TypeDossier.PROCES_VOL: TypePrestation.VOL,
    TypeDossier.ESSAI_RESEAU: TypePrestation.ESSAI,
}

# Dossier type -> sale-record type stored in Ventes.TypeDossier
TYPE_VENTE_PAR_DOSSIER = {
    TypeDossier.CITERNAGE: "VENTE",
    TypeDossier.PROCES_VOL: "VOL",
    TypeDossier.ESSAI_RESEAU: "ESSAI",
}


# ── Entities ────────────────────────────────────────────────────────────


@dataclass
class Tarif:
    """A priced offering valid over a time window."""

    type_prestation: str
    prix_ht: Decimal
    taux_tva: Decimal
    date_debut: date
    volume_reference: int | None = None
    date_fin: date | None = None
    id: int | None = None

    def est_actif(self, maintenant: date | None = None) -> bool:
        """Active iff date_fin is absent or strictly after *maintenant*."""
        if self.date_fin is None:
            return True
        return self.date_fin > (maintenant or date.today())


@dataclass
class Client:
    """A customer of the utility."""

    code_client: str
    nom_raison_sociale: str
    adresse: str
    telephone: str | None = None
    email: str | None = None
    id: int | None = None


@dataclass
class LigneCiterne:
    """One tank row of a quote.

    The price fields are the snapshot persisted with the line; they stay
    ``None`` until the quote has been priced.
    """

    nombre_citernes: int
    volume_par_citerne: Decimal
    inclure_transport: bool = False
    prix_unitaire_m3_ht: Decimal | None = None
    taux_tva_eau: Decimal | None = None
    prix_transport_unitaire_ht: Decimal | None = None
    taux_tva_transport: Decimal | None = None
    id: int | None = None

    @property
    def volume_ligne(self) -> Decimal:
        return self.nombre_citernes * self.volume_par_citerne


@dataclass
class Vente:
    """Sale record owning the tank lines of a quote."""

    client_id: int
    type_dossier: str
    date_vente: date
    lignes: list[LigneCiterne] = field(default_factory=list)
    id: int | None = None


@dataclass
class Devis:
    """A quote: a priced proposal prior to sale confirmation."""

    code_devis: str
    vente: Vente
    statut: StatutDevis = StatutDevis.EN_ATTENTE
    notes: str | None = None
    totaux: TotauxDevis | None = None
    date_creation: datetime | None = None
    date_modification: datetime | None = None
    id: int | None = None


# ── Value Objects ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class TarifResolu:
    """Unit price and tax rate resolved for a service type."""

    type_prestation: TypePrestation
    prix_ht: Decimal
    taux_tva: Decimal
    tarif_id: int | None = None


@dataclass(frozen=True)
class PrixTransport:
    """Outcome of a transport bracket lookup.

    ``source`` is one of ``"tranche"``, ``"plafond"``, ``"general"`` or
    ``"defaut"``.
    """

    prix_ht: Decimal
    source: str
    volume_reference: int | None = None
    tarif_id: int | None = None


@dataclass(frozen=True)
class TotauxLigne:
    """Per-line monetary breakdown."""

    volume_ligne: Decimal
    eau_ht: Decimal
    prix_transport_unitaire_ht: Decimal
    transport_ht: Decimal
    transport_tva: Decimal


@dataclass(frozen=True)
class TotauxDevis:
    """Aggregate HT/TVA/TTC totals of a quote."""

    volume_total: Decimal = ZERO
    total_eau_ht: Decimal = ZERO
    total_eau_tva: Decimal = ZERO
    total_eau_ttc: Decimal = ZERO
    total_transport_ht: Decimal = ZERO
    total_transport_tva: Decimal = ZERO
    total_transport_ttc: Decimal = ZERO
    total_ht: Decimal = ZERO
    total_tva: Decimal = ZERO
    total_ttc: Decimal = ZERO
    lignes: tuple[TotauxLigne, ...] = ()

    def as_dict(self) -> dict[str, Decimal]:
        """Totals keyed by their persisted column names."""
        return {
            "VolumeTotal": self.volume_total,
            "TotalEauHT": self.total_eau_ht,
            "TotalEauTVA": self.total_eau_tva,
            "TotalEauTTC": self.total_eau_ttc,
            "TotalTransportHT": self.total_transport_ht,
            "TotalTransportTVA": self.total_transport_tva,
            "TotalTransportTTC": self.total_transport_ttc,
            "TotalHT": self.total_ht,
            "TotalTVA": self.total_tva,
            "TotalTTC": self.total_ttc,
        }


@dataclass(frozen=True)
class Chiffrage:
    """A fully priced quote, before or without persistence."""

    tarif_eau: TarifResolu
    taux_tva_transport: Decimal
    lignes: tuple[LigneCiterne, ...]
    totaux: TotauxDevis


@dataclass(frozen=True)
class DemandeDevis:
    """Validated, normalized input for pricing or creating a quote.

    ``client_id`` is ``None`` when ``nouveau_client`` carries the data of a
    client to create.
    """

    type_dossier: TypeDossier
    date_devis: date
    lignes: tuple[LigneCiterne, ...]
    client_id: int | None = None
    nouveau_client: Client | None = None
    statut: StatutDevis = StatutDevis.EN_ATTENTE
    notes: str | None = None
    prix_transport_defaut: Decimal = ZERO
    taux_tva_transport: Decimal | None = None
