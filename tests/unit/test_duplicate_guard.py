"""At most one active tariff per slot."""

from datetime import date
from decimal import Decimal

import pytest

from domain.duplicate_guard import DuplicateTariffGuard, find_conflict, is_conflict
from domain.exceptions import TarifEnDoublon
from domain.models import Tarif

AUJOURDHUI = date(2025, 6, 1)


def _tarif(type_prestation, volume=None, fin=None, id=None):
    return Tarif(type_prestation, Decimal("100"), Decimal("0.19"), date(2025, 1, 1),
                 volume_reference=volume, date_fin=fin, id=id)


class TestIsConflict:
    def test_same_type_active(self):
        assert is_conflict(_tarif("CITERNAGE"), _tarif("CITERNAGE", id=1), AUJOURDHUI)

    def test_type_compared_after_normalization(self):
        assert is_conflict(_tarif(" citernage "), _tarif("CITERNAGE", id=1), AUJOURDHUI)

    def test_other_type(self):
        assert not is_conflict(_tarif("VOL"), _tarif("CITERNAGE", id=1), AUJOURDHUI)

    def test_closed_existing(self):
        existant = _tarif("CITERNAGE", fin=date(2025, 3, 1), id=1)
        assert not is_conflict(_tarif("CITERNAGE"), existant, AUJOURDHUI)

    def test_transport_distinct_volumes(self):
        assert not is_conflict(_tarif("TRANSPORT", 20), _tarif("TRANSPORT", 10, id=1), AUJOURDHUI)

    def test_transport_same_volume(self):
        assert is_conflict(_tarif("TRANSPORT", 10), _tarif("TRANSPORT", 10, id=1), AUJOURDHUI)

    def test_transport_both_without_volume(self):
        assert is_conflict(_tarif("TRANSPORT"), _tarif("TRANSPORT", id=1), AUJOURDHUI)

    def test_transport_volume_vs_catch_all(self):
        assert not is_conflict(_tarif("TRANSPORT", 10), _tarif("TRANSPORT", id=1), AUJOURDHUI)


class TestFindConflict:
    def test_self_exclusion(self):
        existant = _tarif("CITERNAGE", id=7)
        assert find_conflict(_tarif("CITERNAGE"), [existant], exclude_id=7,
                             maintenant=AUJOURDHUI) is None

    def test_exclusion_does_not_hide_others(self):
        tarifs = [_tarif("CITERNAGE", id=7), _tarif("CITERNAGE", id=8)]
        conflit = find_conflict(_tarif("CITERNAGE"), tarifs, exclude_id=7, maintenant=AUJOURDHUI)
        assert conflit.id == 8


class TestDuplicateTariffGuard:
    def test_raises_with_existing_id(self, fake_uow):
        premier = fake_uow.tarifs.save(_tarif("CITERNAGE"))
        guard = DuplicateTariffGuard(fake_uow.tarifs)
        with pytest.raises(TarifEnDoublon) as exc_info:
            guard.ensure_no_conflict(_tarif("citernage"), maintenant=AUJOURDHUI)
        err = exc_info.value
        assert err.tarif_existant_id == premier.id
        assert err.type_prestation == "CITERNAGE"
        assert err.status == 409
        assert err.to_dict()["existingTarifId"] == premier.id
        assert f"(ID: {premier.id})" in str(err)

    def test_no_conflict(self, fake_uow):
        fake_uow.tarifs.save(_tarif("TRANSPORT", 10))
        guard = DuplicateTariffGuard(fake_uow.tarifs)
        guard.ensure_no_conflict(_tarif("TRANSPORT", 20), maintenant=AUJOURDHUI)
