"""Domain errors.

Each error carries a ``code`` and an HTTP-style ``status`` so the boundary
layer can translate it without inspecting messages.
"""

from __future__ import annotations


class GestionEauError(Exception):
    """Base class of every domain error."""

    code = "ERREUR"
    status = 500

    def to_dict(self) -> dict:
        return {"error": str(self), "code": self.code}


class ValidationError(GestionEauError):
    """A field is missing, malformed or out of range."""

    code = "VALIDATION"
    status = 400

    def __init__(self, champ: str, message: str) -> None:
        super().__init__(f"{champ}: {message}")
        self.champ = champ
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.message, "code": self.code, "champ": self.champ}


class TarifIntrouvable(GestionEauError):
    """No active tariff exists for a service type."""

    code = "TARIF_INTROUVABLE"
    status = 422

    def __init__(self, type_prestation: str) -> None:
        super().__init__(f'Aucun tarif actif pour "{type_prestation}"')
        self.type_prestation = type_prestation


class TarifEnDoublon(GestionEauError):
    """An active tariff already covers the candidate's service type."""

    code = "DUPLICATE_TARIFF"
    status = 409

    def __init__(self, tarif_existant_id: int | None, type_prestation: str) -> None:
        super().__init__(
            f'Un tarif pour "{type_prestation}" existe déjà (ID: {tarif_existant_id})'
        )
        self.tarif_existant_id = tarif_existant_id
        self.type_prestation = type_prestation

    def to_dict(self) -> dict:
        return {
            "error": str(self),
            "code": self.code,
            "existingTarifId": self.tarif_existant_id,
            "typePrestation": self.type_prestation,
        }


class TarifInexistant(GestionEauError):
    """The tariff id given to an update or delete does not exist."""

    code = "TARIF_INEXISTANT"
    status = 404

    def __init__(self, tarif_id: int) -> None:
        super().__init__(f"Tarif {tarif_id} non trouvé")
        self.tarif_id = tarif_id


class ClientIntrouvable(GestionEauError):
    code = "CLIENT_INTROUVABLE"
    status = 404

    def __init__(self, client_id: int) -> None:
        super().__init__(f"Client {client_id} non trouvé")
        self.client_id = client_id


class ClientEnDoublon(GestionEauError):
    code = "DUPLICATE_CLIENT"
    status = 409

    def __init__(self, code_client: str) -> None:
        super().__init__(f'Un client avec le code "{code_client}" existe déjà')
        self.code_client = code_client


class DevisIntrouvable(GestionEauError):
    code = "DEVIS_INTROUVABLE"
    status = 404

    def __init__(self, devis_id: int) -> None:
        super().__init__(f"Devis {devis_id} non trouvé")
        self.devis_id = devis_id
