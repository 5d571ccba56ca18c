#!/usr/bin/env python3
"""Load demo tariffs and clients.

Usage:
    PYTHONPATH=. python scripts/load_demo_data.py [--db sqlite:///data/demo.db]

Creates one active tariff per service type, three TRANSPORT brackets plus
a catch-all, and a few clients. Rows that already exist are skipped.
"""
import argparse
import logging
import os
import sys
from datetime import date
from decimal import Decimal

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from domain.exceptions import ClientEnDoublon, TarifEnDoublon
from domain.models import Client, Tarif
from gestion_eau.app import build_application
from gestion_eau.config import load_config

logger = logging.getLogger("load_demo_data")

DEMO_TARIFS = [
    ("CITERNAGE", "120", "19", None),
    ("VOL", "350", "19", None),
    ("ESSAI", "80", "19", None),
    ("TRANSPORT", "500", "19", 10),
    ("TRANSPORT", "800", "19", 20),
    ("TRANSPORT", "1200", "19", 30),
    ("TRANSPORT", "300", "19", None),
]

DEMO_CLIENTS = [
    ("CLI001", "Entreprise ABC", "Alger Centre, Algeria", "0555123456", "contact@abc.dz"),
    ("CLI002", "Société XYZ", "Oran, Algeria", "0555234567", "info@xyz.dz"),
    ("CLI003", "Client DEF", "Constantine, Algeria", "0555345678", "def@email.dz"),
]


def main():
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--db", help="URL SQLAlchemy (sinon config.yaml / DATABASE_URL)")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    config = load_config()
    if args.db:
        config["database"]["url"] = args.db
    app = build_application(config)

    for type_prestation, prix, tva, volume in DEMO_TARIFS:
        tarif = Tarif(
            type_prestation=type_prestation,
            prix_ht=Decimal(prix),
            taux_tva=Decimal(tva),
            volume_reference=volume,
            date_debut=date.today(),
        )
        try:
            app.tarifs.creer(tarif)
        except TarifEnDoublon as exc:
            logger.info("Ignoré: %s", exc)

    for code, nom, adresse, telephone, email in DEMO_CLIENTS:
        try:
            app.clients.creer(Client(code, nom, adresse, telephone, email))
        except ClientEnDoublon as exc:
            logger.info("Ignoré: %s", exc)

    print(f"Tarifs: {len(app.tarifs.lister())}, clients: {len(app.clients.lister())}")


if __name__ == "__main__":
    main()
