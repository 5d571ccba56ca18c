"""Domain validation rules — pure functions, zero external dependencies.

Only stdlib and domain imports allowed. Every rule raises ValidationError
naming the offending field.
"""

from decimal import Decimal

from domain.exceptions import ValidationError
from domain.models import TypePrestation

PRIX_HT_MAX = Decimal("999999999999999.99")
TAUX_TVA_MAX = Decimal("0.999999")
VOLUME_CITERNE_MIN = Decimal("1")
VOLUME_CITERNE_MAX = Decimal("500")


def check_prix_ht(prix, champ="prix_ht"):
    if prix is None:
        raise ValidationError(champ, "Prix HT requis")
    if prix <= 0 or prix > PRIX_HT_MAX:
        raise ValidationError(
            champ,
            "Prix HT invalide. Doit être un nombre positif inférieur à 999,999,999,999,999.99",
        )


def check_taux_tva(taux, champ="taux_tva"):
    if taux is None:
        raise ValidationError(champ, "Taux TVA requis")
    if taux < 0 or taux > TAUX_TVA_MAX:
        raise ValidationError(champ, "Taux TVA invalide. Doit être une fraction entre 0 et 0.999999")


def validate_tarif(tarif):
    """Check a normalized Tarif before it reaches the duplicate guard."""
    valides = {t.value for t in TypePrestation}
    if not tarif.type_prestation:
        raise ValidationError("type_prestation", "Type de prestation requis")
    if tarif.type_prestation not in valides:
        raise ValidationError(
            "type_prestation",
            f"Type de prestation inconnu: {tarif.type_prestation}",
        )
    check_prix_ht(tarif.prix_ht)
    check_taux_tva(tarif.taux_tva)
    if tarif.date_debut is None:
        raise ValidationError("date_debut", "Date de début requise")
    if tarif.volume_reference is not None:
        if tarif.type_prestation != TypePrestation.TRANSPORT.value:
            raise ValidationError(
                "volume_reference",
                "Le volume de référence ne s'applique qu'au TRANSPORT",
            )
        if tarif.volume_reference < 1:
            raise ValidationError("volume_reference", "Le volume de référence doit être positif")
    if tarif.date_fin is not None and tarif.date_fin < tarif.date_debut:
        raise ValidationError("date_fin", "La date de fin précède la date de début")


def validate_client(client):
    for champ in ("code_client", "nom_raison_sociale", "adresse"):
        if not (getattr(client, champ) or "").strip():
            raise ValidationError(champ, "Champ requis")


def check_ligne(ligne, index):
    prefixe = f"lignes[{index}]"
    if ligne.nombre_citernes is None or ligne.nombre_citernes < 1:
        raise ValidationError(f"{prefixe}.nombre_citernes", "Nombre de citernes invalide")
    volume = ligne.volume_par_citerne
    if volume is None or volume < VOLUME_CITERNE_MIN or volume > VOLUME_CITERNE_MAX:
        raise ValidationError(
            f"{prefixe}.volume_par_citerne", "Volume doit être entre 1 et 500 m³"
        )


def validate_demande(demande):
    """Check a DemandeDevis before any tariff lookup."""
    if demande.client_id is None and demande.nouveau_client is None:
        raise ValidationError("client_id", "Client requis")
    if demande.nouveau_client is not None:
        validate_client(demande.nouveau_client)
    if demande.date_devis is None:
        raise ValidationError("date_devis", "Date du devis requise")
    if not demande.lignes:
        raise ValidationError("lignes", "Au moins une ligne de citerne est requise")
    for index, ligne in enumerate(demande.lignes):
        check_ligne(ligne, index)
    if demande.prix_transport_defaut is not None and demande.prix_transport_defaut < 0:
        raise ValidationError("prix_transport_defaut", "Prix de transport négatif")
    if demande.taux_tva_transport is not None:
        check_taux_tva(demande.taux_tva_transport, "taux_tva_transport")
