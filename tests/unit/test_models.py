"""Tests for domain models — pure Python, no external dependencies."""

from datetime import date
from decimal import Decimal
from enum import Enum

from domain.models import (
    PRESTATION_PAR_DOSSIER,
    TYPE_VENTE_PAR_DOSSIER,
    LigneCiterne,
    StatutDevis,
    Tarif,
    TotauxDevis,
    TypeDossier,
    TypePrestation,
)


class TestEnums:
    def test_type_prestation_values(self):
        assert issubclass(TypePrestation, Enum)
        assert {t.value for t in TypePrestation} == {"CITERNAGE", "TRANSPORT", "VOL", "ESSAI"}

    def test_statut_en_attente_has_space(self):
        assert StatutDevis("EN ATTENTE") is StatutDevis.EN_ATTENTE

    def test_every_dossier_maps_to_a_service(self):
        assert set(PRESTATION_PAR_DOSSIER) == set(TypeDossier)
        assert PRESTATION_PAR_DOSSIER[TypeDossier.PROCES_VOL] is TypePrestation.VOL
        assert PRESTATION_PAR_DOSSIER[TypeDossier.ESSAI_RESEAU] is TypePrestation.ESSAI

    def test_sale_types(self):
        assert TYPE_VENTE_PAR_DOSSIER[TypeDossier.CITERNAGE] == "VENTE"


class TestTarifActif:
    def _tarif(self, date_fin):
        return Tarif("CITERNAGE", Decimal("100"), Decimal("0.19"), date(2024, 1, 1),
                     date_fin=date_fin)

    def test_open_ended_is_active(self):
        assert self._tarif(None).est_actif(date(2030, 1, 1))

    def test_future_end_is_active(self):
        assert self._tarif(date(2025, 1, 2)).est_actif(date(2025, 1, 1))

    def test_end_today_is_inactive(self):
        assert not self._tarif(date(2025, 1, 1)).est_actif(date(2025, 1, 1))

    def test_future_start_still_active(self):
        tarif = Tarif("VOL", Decimal("1"), Decimal("0"), date(2099, 1, 1))
        assert tarif.est_actif(date(2025, 1, 1))


class TestLigneCiterne:
    def test_volume_ligne(self):
        assert LigneCiterne(3, Decimal("12.5")).volume_ligne == Decimal("37.5")


class TestTotauxDevis:
    def test_as_dict_keys(self):
        assert list(TotauxDevis().as_dict()) == [
            "VolumeTotal", "TotalEauHT", "TotalEauTVA", "TotalEauTTC",
            "TotalTransportHT", "TotalTransportTVA", "TotalTransportTTC",
            "TotalHT", "TotalTVA", "TotalTTC",
        ]
