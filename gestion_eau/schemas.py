"""Request payload schemas and parsing into domain objects.

Payloads use the wire keys of the public API (``TypePrestation``,
``citerneRows``, ...). Shape errors are reported by jsonschema; value rules
live in domain.validation.
"""

from __future__ import annotations

from datetime import date, datetime

from jsonschema import Draft202012Validator

from domain.exceptions import ValidationError
from domain.models import (
    Client,
    DemandeDevis,
    LigneCiterne,
    StatutDevis,
    Tarif,
    TypeDossier,
)
from domain.normalization import (
    normalize_tax_rate,
    parse_reference_volume,
    to_decimal,
)

_NOMBRE = {"type": ["number", "string"]}
_NOMBRE_OPT = {"type": ["number", "string", "null"]}
_TEXTE_OPT = {"type": ["string", "null"]}

TARIF_SCHEMA = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "Tarif",
    "type": "object",
    "required": ["TypePrestation", "PrixHT", "TauxTVA"],
    "properties": {
        "TypePrestation": {"type": "string", "minLength": 1},
        "PrixHT": _NOMBRE,
        "TauxTVA": _NOMBRE,
        "VolumeReference": _NOMBRE_OPT,
        "DateDebut": _TEXTE_OPT,
        "DateFin": _TEXTE_OPT,
    },
}

CLIENT_SCHEMA = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "Client",
    "type": "object",
    "required": ["CodeClient", "NomRaisonSociale", "Adresse"],
    "properties": {
        "CodeClient": {"type": "string", "minLength": 1},
        "NomRaisonSociale": {"type": "string", "minLength": 1},
        "Adresse": {"type": "string", "minLength": 1},
        "Telephone": _TEXTE_OPT,
        "Email": _TEXTE_OPT,
    },
}

DEVIS_SCHEMA = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "Devis",
    "type": "object",
    "required": ["clientId", "typeDossier", "dateDevis", "citerneRows"],
    "properties": {
        "clientId": {"type": ["integer", "string"]},
        "codeClient": _TEXTE_OPT,
        "nomRaisonSociale": _TEXTE_OPT,
        "adresse": _TEXTE_OPT,
        "telephone": _TEXTE_OPT,
        "email": _TEXTE_OPT,
        "typeDossier": {"enum": [t.value for t in TypeDossier]},
        "dateDevis": {"type": "string"},
        "statut": {"enum": [s.value for s in StatutDevis] + [None]},
        "notes": _TEXTE_OPT,
        "prixTransportUnitaire_HT": _NOMBRE_OPT,
        "tauxTVA_Transport": _NOMBRE_OPT,
        "citerneRows": {
            "type": "array",
            "minItems": 1,
            "items": {
                "type": "object",
                "required": ["nombreCiternes", "volumeParCiterne"],
                "properties": {
                    "nombreCiternes": _NOMBRE,
                    "volumeParCiterne": _NOMBRE,
                    "inclureTransport": {"type": "boolean"},
                },
            },
        },
    },
}


def validate_payload(data, schema) -> None:
    """Raise ValidationError for the first schema violation, naming its field."""
    errors = sorted(
        Draft202012Validator(schema).iter_errors(data),
        key=lambda e: [str(p) for p in e.absolute_path],
    )
    if not errors:
        return
    error = errors[0]
    chemin = [str(p) for p in error.absolute_path]
    if error.validator == "required" and isinstance(error.instance, dict):
        manquants = [c for c in error.validator_value if c not in error.instance]
        chemin.append(manquants[0] if manquants else "?")
        raise ValidationError(".".join(chemin), "Champ requis")
    raise ValidationError(".".join(chemin) or "payload", error.message)


def parse_date(value, champ) -> date | None:
    if value is None or value == "":
        return None
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00")).date()
    except ValueError:
        raise ValidationError(champ, f"Date invalide: {value}") from None


def _entier(value, champ) -> int:
    nombre = to_decimal(value)
    if nombre is None or nombre != nombre.to_integral_value():
        raise ValidationError(champ, "Nombre entier attendu")
    return int(nombre)


def _decimal(value, champ):
    nombre = to_decimal(value)
    if nombre is None:
        raise ValidationError(champ, "Nombre attendu")
    return nombre


def _taux_optionnel(value, champ):
    if value is None or value == "":
        return None
    taux = normalize_tax_rate(value)
    if taux is None:
        raise ValidationError(champ, "Nombre attendu")
    return taux


def parse_tarif(data: dict) -> Tarif:
    """Tariff payload -> raw Tarif (normalized later by TarifService)."""
    validate_payload(data, TARIF_SCHEMA)
    volume = data.get("VolumeReference")
    volume_reference = parse_reference_volume(volume)
    if volume not in (None, "") and volume_reference is None:
        raise ValidationError("VolumeReference", "Nombre entier attendu")
    return Tarif(
        type_prestation=data["TypePrestation"],
        prix_ht=_decimal(data["PrixHT"], "PrixHT"),
        taux_tva=_decimal(data["TauxTVA"], "TauxTVA"),
        volume_reference=volume_reference,
        date_debut=parse_date(data.get("DateDebut"), "DateDebut"),
        date_fin=parse_date(data.get("DateFin"), "DateFin"),
    )


def parse_client(data: dict) -> Client:
    validate_payload(data, CLIENT_SCHEMA)
    return Client(
        code_client=data["CodeClient"],
        nom_raison_sociale=data["NomRaisonSociale"],
        adresse=data["Adresse"],
        telephone=data.get("Telephone"),
        email=data.get("Email"),
    )


def parse_demande_devis(data: dict, prix_transport_defaut=0) -> DemandeDevis:
    """Quote payload -> DemandeDevis.

    ``clientId == "new"`` means the client fields of the payload describe a
    client to create. Tax rates given as percentages are normalized.
    """
    validate_payload(data, DEVIS_SCHEMA)

    client_id = None
    nouveau_client = None
    if str(data["clientId"]).strip().lower() == "new":
        nouveau_client = Client(
            code_client=data.get("codeClient") or "",
            nom_raison_sociale=data.get("nomRaisonSociale") or "",
            adresse=data.get("adresse") or "",
            telephone=data.get("telephone"),
            email=data.get("email"),
        )
    else:
        client_id = _entier(data["clientId"], "clientId")

    date_devis = parse_date(data["dateDevis"], "dateDevis")
    if date_devis is None:
        raise ValidationError("dateDevis", "Date du devis requise")

    lignes = tuple(
        LigneCiterne(
            nombre_citernes=_entier(row["nombreCiternes"], f"citerneRows.{i}.nombreCiternes"),
            volume_par_citerne=_decimal(row["volumeParCiterne"], f"citerneRows.{i}.volumeParCiterne"),
            inclure_transport=bool(row.get("inclureTransport", False)),
        )
        for i, row in enumerate(data["citerneRows"])
    )

    prix_defaut = data.get("prixTransportUnitaire_HT")
    if prix_defaut in (None, ""):
        prix_defaut = prix_transport_defaut

    return DemandeDevis(
        type_dossier=TypeDossier(data["typeDossier"]),
        date_devis=date_devis,
        lignes=lignes,
        client_id=client_id,
        nouveau_client=nouveau_client,
        statut=StatutDevis(data.get("statut") or StatutDevis.EN_ATTENTE.value),
        notes=data.get("notes"),
        prix_transport_defaut=_decimal(prix_defaut, "prixTransportUnitaire_HT"),
        taux_tva_transport=_taux_optionnel(data.get("tauxTVA_Transport"), "tauxTVA_Transport"),
    )
