#!/usr/bin/env python3
"""
cli.py — Administration des tarifs, clients et devis en ligne de commande.

Usage:
    python -m gestion_eau.cli init-db
    python -m gestion_eau.cli tarifs list
    python -m gestion_eau.cli tarifs add --type TRANSPORT --prix 500 --tva 19 --volume-ref 10
    python -m gestion_eau.cli tarifs update 3 --type CITERNAGE --prix 120 --tva 0.19
    python -m gestion_eau.cli tarifs close 3 [--date-fin 2025-06-30]
    python -m gestion_eau.cli tarifs delete 3
    python -m gestion_eau.cli clients list
    python -m gestion_eau.cli clients add --code CLI001 --nom "Entreprise ABC" --adresse "Alger"
    python -m gestion_eau.cli devis simuler devis.json
    python -m gestion_eau.cli devis creer devis.json
    python -m gestion_eau.cli devis show 12
    python -m gestion_eau.cli devis list
    python -m gestion_eau.cli devis statut 12 ACCEPTE
    python -m gestion_eau.cli devis delete 12
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from domain.exceptions import GestionEauError
from domain.models import StatutDevis
from gestion_eau.app import build_application, configure_logging
from gestion_eau.config import load_config
from gestion_eau.schemas import parse_client, parse_date, parse_demande_devis, parse_tarif

logger = logging.getLogger(__name__)


# ── Serialization ─────────────────────────────────────────────────────────


def tarif_to_dict(tarif):
    return {
        "TarifID": tarif.id,
        "TypePrestation": tarif.type_prestation,
        "PrixHT": tarif.prix_ht,
        "TauxTVA": tarif.taux_tva,
        "VolumeReference": tarif.volume_reference,
        "DateDebut": tarif.date_debut,
        "DateFin": tarif.date_fin,
        "Actif": tarif.est_actif(),
    }


def client_to_dict(client):
    return {
        "ClientID": client.id,
        "CodeClient": client.code_client,
        "NomRaisonSociale": client.nom_raison_sociale,
        "Adresse": client.adresse,
        "Telephone": client.telephone,
        "Email": client.email,
    }


def ligne_to_dict(ligne):
    return {
        "NombreCiternes": ligne.nombre_citernes,
        "VolumeParCiterne": ligne.volume_par_citerne,
        "InclureTransport": ligne.inclure_transport,
        "PrixUnitaireM3_HT": ligne.prix_unitaire_m3_ht,
        "TauxTVA_Eau": ligne.taux_tva_eau,
        "PrixTransportUnitaire_HT": ligne.prix_transport_unitaire_ht,
        "TauxTVA_Transport": ligne.taux_tva_transport,
    }


def devis_to_dict(devis):
    result = {
        "DevisID": devis.id,
        "CodeDevis": devis.code_devis,
        "Statut": devis.statut.value,
        "Notes": devis.notes,
        "DateCreation": devis.date_creation,
        "DateModification": devis.date_modification,
        "VenteID": devis.vente.id,
        "ClientID": devis.vente.client_id,
        "TypeDossier": devis.vente.type_dossier,
        "DateVente": devis.vente.date_vente,
        "Lignes": [ligne_to_dict(l) for l in devis.vente.lignes],
    }
    if devis.totaux is not None:
        result.update(devis.totaux.as_dict())
    return result


def chiffrage_to_dict(chiffrage):
    result = {
        "TypePrestation": chiffrage.tarif_eau.type_prestation.value,
        "PrixUnitaireM3_HT": chiffrage.tarif_eau.prix_ht,
        "TauxTVA_Eau": chiffrage.tarif_eau.taux_tva,
        "TauxTVA_Transport": chiffrage.taux_tva_transport,
        "Lignes": [ligne_to_dict(l) for l in chiffrage.lignes],
    }
    result.update(chiffrage.totaux.as_dict())
    return result


def _print(data) -> None:
    print(json.dumps(data, ensure_ascii=False, indent=2, default=str))


def _read_json(path: str) -> dict:
    with open(path, encoding="utf-8") as f:
        return json.load(f)


# ── Commands ──────────────────────────────────────────────────────────────


def _tarif_payload(args) -> dict:
    return {
        "TypePrestation": args.type,
        "PrixHT": args.prix,
        "TauxTVA": args.tva,
        "VolumeReference": args.volume_ref,
        "DateDebut": args.date_debut,
        "DateFin": getattr(args, "date_fin", None),
    }


def run(args, app) -> None:
    if args.command == "init-db":
        _print({"database": str(app.engine.url), "ok": app.is_healthy()})

    elif args.command == "tarifs":
        if args.action == "list":
            _print([tarif_to_dict(t) for t in app.tarifs.lister()])
        elif args.action == "add":
            _print(tarif_to_dict(app.tarifs.creer(parse_tarif(_tarif_payload(args)))))
        elif args.action == "update":
            tarif = parse_tarif(_tarif_payload(args))
            _print(tarif_to_dict(app.tarifs.modifier(args.id, tarif)))
        elif args.action == "close":
            date_fin = parse_date(args.date_fin, "DateFin")
            _print(tarif_to_dict(app.tarifs.cloturer(args.id, date_fin)))
        elif args.action == "delete":
            _print({"success": True, "deletedId": app.tarifs.supprimer(args.id)})

    elif args.command == "clients":
        if args.action == "list":
            _print([client_to_dict(c) for c in app.clients.lister()])
        elif args.action == "add":
            client = parse_client({
                "CodeClient": args.code,
                "NomRaisonSociale": args.nom,
                "Adresse": args.adresse,
                "Telephone": args.telephone,
                "Email": args.email,
            })
            _print(client_to_dict(app.clients.creer(client)))

    elif args.command == "devis":
        prix_defaut = app.config["tarification"]["prix_transport_defaut"]
        if args.action == "simuler":
            demande = parse_demande_devis(_read_json(args.fichier), prix_defaut)
            _print(chiffrage_to_dict(app.devis.simuler(demande)))
        elif args.action == "creer":
            demande = parse_demande_devis(_read_json(args.fichier), prix_defaut)
            _print(devis_to_dict(app.devis.creer(demande)))
        elif args.action == "modifier":
            demande = parse_demande_devis(_read_json(args.fichier), prix_defaut)
            _print(devis_to_dict(app.devis.modifier(args.id, demande)))
        elif args.action == "show":
            _print(devis_to_dict(app.devis.obtenir(args.id)))
        elif args.action == "statut":
            _print(devis_to_dict(app.devis.changer_statut(args.id, StatutDevis(args.statut))))
        elif args.action == "list":
            _print([devis_to_dict(d) for d in app.devis.lister()])
        elif args.action == "delete":
            _print({"success": True, "deletedId": app.devis.supprimer(args.id)})


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Gestion des tarifs et devis de citernage")
    parser.add_argument("--config", help="Chemin du fichier config.yaml")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="Créer les tables et vérifier la connexion")

    tarifs = sub.add_parser("tarifs", help="Tarifs historiques").add_subparsers(
        dest="action", required=True
    )
    tarifs.add_parser("list")
    for name in ("add", "update"):
        p = tarifs.add_parser(name)
        if name == "update":
            p.add_argument("id", type=int)
        p.add_argument("--type", required=True, help="CITERNAGE, TRANSPORT, VOL, ESSAI")
        p.add_argument("--prix", required=True, help="Prix HT par m3")
        p.add_argument("--tva", required=True, help="Taux TVA (19 ou 0.19)")
        p.add_argument("--volume-ref", dest="volume_ref", help="Volume de référence (TRANSPORT)")
        p.add_argument("--date-debut", dest="date_debut", help="AAAA-MM-JJ, aujourd'hui par défaut")
        p.add_argument("--date-fin", dest="date_fin", help="AAAA-MM-JJ")
    close = tarifs.add_parser("close")
    close.add_argument("id", type=int)
    close.add_argument("--date-fin", dest="date_fin")
    delete = tarifs.add_parser("delete")
    delete.add_argument("id", type=int)

    clients = sub.add_parser("clients", help="Clients").add_subparsers(
        dest="action", required=True
    )
    clients.add_parser("list")
    add_client = clients.add_parser("add")
    add_client.add_argument("--code", required=True)
    add_client.add_argument("--nom", required=True)
    add_client.add_argument("--adresse", required=True)
    add_client.add_argument("--telephone")
    add_client.add_argument("--email")

    devis = sub.add_parser("devis", help="Devis").add_subparsers(dest="action", required=True)
    for name in ("simuler", "creer"):
        devis.add_parser(name).add_argument("fichier", help="Demande de devis (JSON)")
    modifier = devis.add_parser("modifier")
    modifier.add_argument("id", type=int)
    modifier.add_argument("fichier", help="Demande de devis (JSON)")
    devis.add_parser("show").add_argument("id", type=int)
    statut = devis.add_parser("statut")
    statut.add_argument("id", type=int)
    statut.add_argument("statut", choices=[s.value for s in StatutDevis])
    devis.add_parser("list")
    devis.add_parser("delete").add_argument("id", type=int)
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    config = load_config(args.config)
    configure_logging(config)
    app = build_application(config)
    try:
        run(args, app)
    except GestionEauError as exc:
        print(json.dumps(exc.to_dict(), ensure_ascii=False, default=str), file=sys.stderr)
        return 1
    except (OSError, json.JSONDecodeError) as exc:
        print(f"Fichier illisible: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
