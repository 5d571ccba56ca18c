from datetime import datetime, timezone
from sqlalchemy import (
    Boolean, Column, Integer, String, Numeric, Date, DateTime, Text, ForeignKey, Index,
)
from sqlalchemy.orm import DeclarativeBase, relationship

# decimal(18,2) prices, decimal(6,4) tax rates
PRIX = Numeric(18, 2)
TAUX = Numeric(6, 4)
MONTANT = Numeric(28, 8)


class Base(DeclarativeBase):
    pass


class TarifHistorique(Base):
    __tablename__ = "Tarifs_Historique"

    id = Column("TarifID", Integer, primary_key=True)
    type_prestation = Column("TypePrestation", String(50), nullable=False)
    prix_ht = Column("PrixHT", PRIX, nullable=False)
    taux_tva = Column("TauxTVA", TAUX, nullable=False)
    volume_reference = Column("VolumeReference", Integer)  # TRANSPORT brackets only
    date_debut = Column("DateDebut", Date, nullable=False)
    date_fin = Column("DateFin", Date)  # NULL = still active

    __table_args__ = (
        Index("idx_tarifs_type", "TypePrestation"),
        Index("idx_tarifs_type_volume", "TypePrestation", "VolumeReference"),
    )


class Client(Base):
    __tablename__ = "Clients"

    id = Column("ClientID", Integer, primary_key=True)
    code_client = Column("CodeClient", String(50), nullable=False, unique=True)
    nom_raison_sociale = Column("NomRaisonSociale", String(255), nullable=False)
    adresse = Column("Adresse", Text, nullable=False)
    telephone = Column("Telephone", String(50))
    email = Column("Email", String(255))

    ventes = relationship("Vente", back_populates="client")


class Vente(Base):
    __tablename__ = "Ventes"

    id = Column("VenteID", Integer, primary_key=True)
    client_id = Column("ClientID", Integer, ForeignKey("Clients.ClientID"), nullable=False)
    type_dossier = Column("TypeDossier", String(20), nullable=False)  # VENTE, VOL, ESSAI
    date_vente = Column("DateVente", Date, nullable=False)

    client = relationship("Client", back_populates="ventes")
    lignes = relationship(
        "LigneVente", back_populates="vente", cascade="all, delete-orphan",
        order_by="LigneVente.id",
    )
    devis = relationship("Devis", back_populates="vente", uselist=False)

    __table_args__ = (
        Index("idx_ventes_client", "ClientID"),
    )


class Devis(Base):
    __tablename__ = "Devis"

    id = Column("DevisID", Integer, primary_key=True)
    vente_id = Column("VenteID", Integer, ForeignKey("Ventes.VenteID"), nullable=False)
    code_devis = Column("CodeDevis", String(30), nullable=False, unique=True)
    statut = Column("Statut", String(20), nullable=False, default="EN ATTENTE")
    notes = Column("Notes", Text)
    date_creation = Column("DateCreation", DateTime, default=lambda: datetime.now(timezone.utc))
    date_modification = Column(
        "DateModification", DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
    # Snapshot of the derived totals; lines + tariffs remain the source of truth
    volume_total = Column("VolumeTotal", MONTANT)
    total_eau_ht = Column("TotalEauHT", MONTANT)
    total_eau_tva = Column("TotalEauTVA", MONTANT)
    total_eau_ttc = Column("TotalEauTTC", MONTANT)
    total_transport_ht = Column("TotalTransportHT", MONTANT)
    total_transport_tva = Column("TotalTransportTVA", MONTANT)
    total_transport_ttc = Column("TotalTransportTTC", MONTANT)
    total_ht = Column("TotalHT", MONTANT)
    total_tva = Column("TotalTVA", MONTANT)
    total_ttc = Column("TotalTTC", MONTANT)

    vente = relationship("Vente", back_populates="devis")

    __table_args__ = (
        Index("idx_devis_vente", "VenteID"),
        Index("idx_devis_statut", "Statut"),
    )


class LigneVente(Base):
    __tablename__ = "LignesVentes"

    id = Column("LigneID", Integer, primary_key=True)
    vente_id = Column("VenteID", Integer, ForeignKey("Ventes.VenteID"), nullable=False)
    nombre_citernes = Column("NombreCiternes", Integer, nullable=False)
    volume_par_citerne = Column("VolumeParCiterne", Numeric(10, 2), nullable=False)
    inclure_transport = Column("InclureTransport", Boolean, default=False)
    prix_unitaire_m3_ht = Column("PrixUnitaireM3_HT", PRIX)
    taux_tva_eau = Column("TauxTVA_Eau", TAUX)
    prix_transport_unitaire_ht = Column("PrixTransportUnitaire_HT", PRIX)
    taux_tva_transport = Column("TauxTVA_Transport", TAUX)

    vente = relationship("Vente", back_populates="lignes")

    __table_args__ = (
        Index("idx_lignes_vente", "VenteID"),
    )
