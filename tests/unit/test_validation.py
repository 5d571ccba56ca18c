"""Field rules raising ValidationError."""

from datetime import date
from decimal import Decimal

import pytest

from domain.exceptions import ValidationError
from domain.models import Client, DemandeDevis, LigneCiterne, Tarif, TypeDossier
from domain.validation import validate_client, validate_demande, validate_tarif


def _tarif(**kwargs):
    valeurs = dict(type_prestation="TRANSPORT", prix_ht=Decimal("500"),
                   taux_tva=Decimal("0.19"), date_debut=date(2025, 1, 1))
    valeurs.update(kwargs)
    return Tarif(**valeurs)


def _demande(**kwargs):
    valeurs = dict(type_dossier=TypeDossier.CITERNAGE, date_devis=date(2025, 6, 1),
                   lignes=(LigneCiterne(2, Decimal("50")),), client_id=1)
    valeurs.update(kwargs)
    return DemandeDevis(**valeurs)


class TestValidateTarif:
    def test_valid(self):
        validate_tarif(_tarif(volume_reference=10))

    @pytest.mark.parametrize("kwargs, champ", [
        ({"type_prestation": ""}, "type_prestation"),
        ({"type_prestation": "LIVRAISON"}, "type_prestation"),
        ({"prix_ht": Decimal("0")}, "prix_ht"),
        ({"prix_ht": Decimal("1000000000000000")}, "prix_ht"),
        ({"taux_tva": Decimal("-0.01")}, "taux_tva"),
        ({"taux_tva": Decimal("1")}, "taux_tva"),
        ({"taux_tva": None}, "taux_tva"),
        ({"volume_reference": 0}, "volume_reference"),
        ({"type_prestation": "VOL", "volume_reference": 10}, "volume_reference"),
        ({"date_fin": date(2024, 12, 31)}, "date_fin"),
    ])
    def test_invalid(self, kwargs, champ):
        with pytest.raises(ValidationError) as exc_info:
            validate_tarif(_tarif(**kwargs))
        assert exc_info.value.champ == champ
        assert exc_info.value.status == 400

    def test_upper_bounds_inclusive(self):
        validate_tarif(_tarif(prix_ht=Decimal("999999999999999.99"),
                              taux_tva=Decimal("0.999999")))


class TestValidateClient:
    def test_blank_name_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_client(Client("CLI9", "  ", "Oran"))
        assert exc_info.value.champ == "nom_raison_sociale"


class TestValidateDemande:
    def test_valid(self):
        validate_demande(_demande())

    def test_client_required(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_demande(_demande(client_id=None))
        assert exc_info.value.champ == "client_id"

    def test_lines_required(self):
        with pytest.raises(ValidationError):
            validate_demande(_demande(lignes=()))

    @pytest.mark.parametrize("volume", ["0.5", "500.01"])
    def test_volume_bounds(self, volume):
        with pytest.raises(ValidationError) as exc_info:
            validate_demande(_demande(lignes=(
                LigneCiterne(1, Decimal("10")),
                LigneCiterne(1, Decimal(volume)),
            )))
        assert exc_info.value.champ == "lignes[1].volume_par_citerne"

    def test_tank_count_positive(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_demande(_demande(lignes=(LigneCiterne(0, Decimal("10")),)))
        assert exc_info.value.champ == "lignes[0].nombre_citernes"

    def test_new_client_validated(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_demande(_demande(client_id=None, nouveau_client=Client("", "X", "Y")))
        assert exc_info.value.champ == "code_client"
