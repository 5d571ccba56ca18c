"""Command line round trips on a temporary database."""

import json
from decimal import Decimal

import pytest
import yaml

from gestion_eau.cli import main


@pytest.fixture
def run(tmp_path, monkeypatch, capsys):
    for var in ("DATABASE_URL", "REDIS_URL", "LOG_LEVEL", "GESTION_EAU_CONFIG"):
        monkeypatch.delenv(var, raising=False)
    config_path = tmp_path / "config.yaml"
    config_path.write_text(yaml.safe_dump({
        "database": {"url": f"sqlite:///{tmp_path / 'cli.db'}"},
        "logging": {"level": "WARNING"},
    }))

    def _run(*argv):
        code = main(["--config", str(config_path), *argv])
        captured = capsys.readouterr()
        sortie = json.loads(captured.out) if captured.out.strip() else None
        derniere = captured.err.strip().splitlines()[-1] if captured.err.strip() else ""
        erreur = json.loads(derniere) if derniere.startswith("{") else captured.err
        return code, sortie, erreur

    return _run


def test_init_db(run):
    code, sortie, _ = run("init-db")
    assert code == 0
    assert sortie["ok"] is True


def test_tariff_lifecycle(run):
    code, cree, _ = run("tarifs", "add", "--type", "citernage", "--prix", "120", "--tva", "19")
    assert code == 0
    assert cree["TypePrestation"] == "CITERNAGE"
    assert cree["TauxTVA"] == "0.1900"

    code, _, erreur = run("tarifs", "add", "--type", "CITERNAGE", "--prix", "130", "--tva", "19")
    assert code == 1
    assert erreur["code"] == "DUPLICATE_TARIFF"
    assert erreur["existingTarifId"] == cree["TarifID"]

    code, ferme, _ = run("tarifs", "close", str(cree["TarifID"]))
    assert code == 0
    assert ferme["Actif"] is False

    code, liste, _ = run("tarifs", "list")
    assert [t["TarifID"] for t in liste] == [cree["TarifID"]]

    code, supprime, _ = run("tarifs", "delete", str(cree["TarifID"]))
    assert supprime == {"success": True, "deletedId": cree["TarifID"]}


def test_quote_from_json_file(run, tmp_path):
    run("tarifs", "add", "--type", "CITERNAGE", "--prix", "100", "--tva", "0.19")
    _, client, _ = run("clients", "add", "--code", "CLI001", "--nom", "ABC", "--adresse", "Alger")

    demande = tmp_path / "devis.json"
    demande.write_text(json.dumps({
        "clientId": client["ClientID"],
        "typeDossier": "CITERNAGE",
        "dateDevis": "2026-01-15",
        "citerneRows": [{"nombreCiternes": 2, "volumeParCiterne": 50}],
    }))

    code, simulation, _ = run("devis", "simuler", str(demande))
    assert code == 0
    assert Decimal(simulation["TotalTTC"]) == 11900

    code, devis, _ = run("devis", "creer", str(demande))
    assert code == 0
    assert devis["CodeDevis"].startswith("DEV-2026-")
    assert devis["Statut"] == "EN ATTENTE"

    code, accepte, _ = run("devis", "statut", str(devis["DevisID"]), "ACCEPTE")
    assert accepte["Statut"] == "ACCEPTE"

    code, lu, _ = run("devis", "show", str(devis["DevisID"]))
    assert lu["Statut"] == "ACCEPTE"
    assert len(lu["Lignes"]) == 1

    code, liste, _ = run("devis", "list")
    assert [d["DevisID"] for d in liste] == [devis["DevisID"]]

    code, supprime, _ = run("devis", "delete", str(devis["DevisID"]))
    assert supprime == {"success": True, "deletedId": devis["DevisID"]}
    code, liste, _ = run("devis", "list")
    assert liste == []

    code, _, erreur = run("devis", "delete", str(devis["DevisID"]))
    assert code == 1
    assert erreur["code"] == "DEVIS_INTROUVABLE"


def test_missing_tariff_reported(run, tmp_path):
    _, client, _ = run("clients", "add", "--code", "CLI001", "--nom", "ABC", "--adresse", "Alger")
    demande = tmp_path / "devis.json"
    demande.write_text(json.dumps({
        "clientId": client["ClientID"],
        "typeDossier": "PROCES_VOL",
        "dateDevis": "2026-01-15",
        "citerneRows": [{"nombreCiternes": 1, "volumeParCiterne": 10}],
    }))
    code, _, erreur = run("devis", "creer", str(demande))
    assert code == 1
    assert erreur["code"] == "TARIF_INTROUVABLE"


def test_unreadable_file(run, tmp_path):
    code, _, erreur = run("devis", "simuler", str(tmp_path / "absent.json"))
    assert code == 1
    assert "Fichier illisible" in erreur
