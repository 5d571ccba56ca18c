"""SQLAlchemy implementations of domain repository ports.

Each adapter translates between ORM models (sqlalchemy_models) and
pure domain models (domain.models), keeping the domain layer free
of any infrastructure dependency.
"""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from gestion_eau.adapters.outbound.sqlalchemy_models import (
    Client as OrmClient,
    Devis as OrmDevis,
    LigneVente as OrmLigneVente,
    TarifHistorique as OrmTarif,
    Vente as OrmVente,
)
from domain.models import (
    Client as DomainClient,
    Devis as DomainDevis,
    LigneCiterne,
    StatutDevis,
    Tarif as DomainTarif,
    TotauxDevis,
    Vente as DomainVente,
)
from domain.ports import ClientRepository, DevisRepository, TarifRepository

_TOTAUX_COLONNES = (
    "volume_total",
    "total_eau_ht",
    "total_eau_tva",
    "total_eau_ttc",
    "total_transport_ht",
    "total_transport_tva",
    "total_transport_ttc",
    "total_ht",
    "total_tva",
    "total_ttc",
)


class SqlAlchemyTarifRepository(TarifRepository):
    """SQLAlchemy adapter for the TarifRepository port."""

    def __init__(self, session: Session) -> None:
        self._session = session

    # ── Queries ────────────────────────────────────────────────────────

    def list_all(self) -> list[DomainTarif]:
        """Return every tariff row, active or not."""
        return [self._to_domain(orm) for orm in self._session.scalars(select(OrmTarif))]

    def get(self, tarif_id: int) -> DomainTarif | None:
        orm = self._session.get(OrmTarif, tarif_id)
        return self._to_domain(orm) if orm is not None else None

    # ── Commands ───────────────────────────────────────────────────────

    def save(self, tarif: DomainTarif) -> DomainTarif:
        """Insert (no id) or update (id set) a tariff and return it with its id."""
        orm = self._session.get(OrmTarif, tarif.id) if tarif.id is not None else None
        if orm is None:
            orm = OrmTarif()
            self._session.add(orm)
        orm.type_prestation = tarif.type_prestation
        orm.prix_ht = tarif.prix_ht
        orm.taux_tva = tarif.taux_tva
        orm.volume_reference = tarif.volume_reference
        orm.date_debut = tarif.date_debut
        orm.date_fin = tarif.date_fin
        self._session.flush()
        tarif.id = orm.id
        return tarif

    def delete(self, tarif_id: int) -> bool:
        orm = self._session.get(OrmTarif, tarif_id)
        if orm is None:
            return False
        self._session.delete(orm)
        self._session.flush()
        return True

    # ── Internal helpers ───────────────────────────────────────────────

    @staticmethod
    def _to_domain(orm: OrmTarif) -> DomainTarif:
        return DomainTarif(
            type_prestation=orm.type_prestation,
            prix_ht=Decimal(orm.prix_ht),
            taux_tva=Decimal(orm.taux_tva),
            volume_reference=orm.volume_reference,
            date_debut=orm.date_debut,
            date_fin=orm.date_fin,
            id=orm.id,
        )


class SqlAlchemyClientRepository(ClientRepository):
    """SQLAlchemy adapter for the ClientRepository port."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def list_all(self) -> list[DomainClient]:
        stmt = select(OrmClient).order_by(OrmClient.nom_raison_sociale)
        return [self._to_domain(orm) for orm in self._session.scalars(stmt)]

    def get(self, client_id: int) -> DomainClient | None:
        orm = self._session.get(OrmClient, client_id)
        return self._to_domain(orm) if orm is not None else None

    def find_by_code(self, code_client: str) -> DomainClient | None:
        orm = self._session.execute(
            select(OrmClient).where(OrmClient.code_client == code_client)
        ).scalar_one_or_none()
        return self._to_domain(orm) if orm is not None else None

    def save(self, client: DomainClient) -> DomainClient:
        orm = self._session.get(OrmClient, client.id) if client.id is not None else None
        if orm is None:
            orm = OrmClient()
            self._session.add(orm)
        orm.code_client = client.code_client
        orm.nom_raison_sociale = client.nom_raison_sociale
        orm.adresse = client.adresse
        orm.telephone = client.telephone
        orm.email = client.email
        self._session.flush()
        client.id = orm.id
        return client

    @staticmethod
    def _to_domain(orm: OrmClient) -> DomainClient:
        return DomainClient(
            code_client=orm.code_client,
            nom_raison_sociale=orm.nom_raison_sociale,
            adresse=orm.adresse,
            telephone=orm.telephone,
            email=orm.email,
            id=orm.id,
        )


class SqlAlchemyDevisRepository(DevisRepository):
    """SQLAlchemy adapter for the DevisRepository port.

    A quote is stored as one Ventes row, one Devis row and its LignesVentes.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    # ── Commands ───────────────────────────────────────────────────────

    def add(self, devis: DomainDevis) -> DomainDevis:
        """Insert sale, quote and lines; ids are assigned on flush."""
        orm_vente = OrmVente(
            client_id=devis.vente.client_id,
            type_dossier=devis.vente.type_dossier,
            date_vente=devis.vente.date_vente,
            lignes=[self._ligne_to_orm(l) for l in devis.vente.lignes],
        )
        orm_devis = OrmDevis(
            vente=orm_vente,
            code_devis=devis.code_devis,
            statut=devis.statut.value,
            notes=devis.notes,
        )
        self._apply_totaux(orm_devis, devis.totaux)
        self._session.add_all([orm_vente, orm_devis])
        self._session.flush()
        return self._to_domain(orm_devis)

    def update(self, devis: DomainDevis) -> DomainDevis:
        """Update quote and sale fields; lines are deleted and recreated."""
        orm_devis = self._session.get(OrmDevis, devis.id)
        if orm_devis is None:
            raise ValueError(f"Devis {devis.id} introuvable")
        orm_vente = orm_devis.vente
        orm_vente.client_id = devis.vente.client_id
        orm_vente.type_dossier = devis.vente.type_dossier
        orm_vente.date_vente = devis.vente.date_vente
        if self._lignes_changees(orm_vente.lignes, devis.vente.lignes):
            orm_vente.lignes = [self._ligne_to_orm(l) for l in devis.vente.lignes]
        orm_devis.statut = devis.statut.value
        orm_devis.notes = devis.notes
        self._apply_totaux(orm_devis, devis.totaux)
        self._session.flush()
        return self._to_domain(orm_devis)

    def delete(self, devis_id: int) -> bool:
        """Delete the quote then its sale; the sale cascades to its lines."""
        orm_devis = self._session.get(OrmDevis, devis_id)
        if orm_devis is None:
            return False
        self._session.delete(orm_devis)
        self._session.delete(orm_devis.vente)
        self._session.flush()
        return True

    # ── Queries ────────────────────────────────────────────────────────

    def list_all(self) -> list[DomainDevis]:
        """Every quote, newest first."""
        stmt = select(OrmDevis).order_by(OrmDevis.id.desc())
        return [self._to_domain(orm) for orm in self._session.scalars(stmt)]

    def get(self, devis_id: int) -> DomainDevis | None:
        orm = self._session.get(OrmDevis, devis_id)
        return self._to_domain(orm) if orm is not None else None

    def get_by_code(self, code_devis: str) -> DomainDevis | None:
        orm = self._session.execute(
            select(OrmDevis).where(OrmDevis.code_devis == code_devis)
        ).scalar_one_or_none()
        return self._to_domain(orm) if orm is not None else None

    # ── Internal helpers ───────────────────────────────────────────────

    @staticmethod
    def _lignes_changees(orm_lignes, lignes: list[LigneCiterne]) -> bool:
        """False only when *lignes* are exactly the persisted rows (same ids)."""
        return [l.id for l in lignes] != [o.id for o in orm_lignes] or any(
            l.id is None for l in lignes
        )

    @staticmethod
    def _apply_totaux(orm: OrmDevis, totaux: TotauxDevis | None) -> None:
        for colonne in _TOTAUX_COLONNES:
            setattr(orm, colonne, getattr(totaux, colonne) if totaux is not None else None)

    @staticmethod
    def _ligne_to_orm(ligne: LigneCiterne) -> OrmLigneVente:
        return OrmLigneVente(
            nombre_citernes=ligne.nombre_citernes,
            volume_par_citerne=ligne.volume_par_citerne,
            inclure_transport=ligne.inclure_transport,
            prix_unitaire_m3_ht=ligne.prix_unitaire_m3_ht,
            taux_tva_eau=ligne.taux_tva_eau,
            prix_transport_unitaire_ht=ligne.prix_transport_unitaire_ht,
            taux_tva_transport=ligne.taux_tva_transport,
        )

    @staticmethod
    def _decimal(value) -> Decimal | None:
        return Decimal(value) if value is not None else None

    @classmethod
    def _ligne_to_domain(cls, orm: OrmLigneVente) -> LigneCiterne:
        return LigneCiterne(
            nombre_citernes=orm.nombre_citernes,
            volume_par_citerne=Decimal(orm.volume_par_citerne),
            inclure_transport=bool(orm.inclure_transport),
            prix_unitaire_m3_ht=cls._decimal(orm.prix_unitaire_m3_ht),
            taux_tva_eau=cls._decimal(orm.taux_tva_eau),
            prix_transport_unitaire_ht=cls._decimal(orm.prix_transport_unitaire_ht),
            taux_tva_transport=cls._decimal(orm.taux_tva_transport),
            id=orm.id,
        )

    @classmethod
    def _to_domain(cls, orm: OrmDevis) -> DomainDevis:
        vente = DomainVente(
            client_id=orm.vente.client_id,
            type_dossier=orm.vente.type_dossier,
            date_vente=orm.vente.date_vente,
            lignes=[cls._ligne_to_domain(l) for l in orm.vente.lignes],
            id=orm.vente.id,
        )
        totaux = None
        if orm.total_ttc is not None:
            totaux = TotauxDevis(
                **{c: Decimal(getattr(orm, c) or 0) for c in _TOTAUX_COLONNES}
            )
        valid_statuts = {s.value for s in StatutDevis}
        statut = (
            StatutDevis(orm.statut)
            if orm.statut in valid_statuts
            else StatutDevis.EN_ATTENTE
        )
        return DomainDevis(
            code_devis=orm.code_devis,
            vente=vente,
            statut=statut,
            notes=orm.notes,
            totaux=totaux,
            date_creation=orm.date_creation,
            date_modification=orm.date_modification,
            id=orm.id,
        )
