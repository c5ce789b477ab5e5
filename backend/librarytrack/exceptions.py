"""
Erreurs métier du poste de scan.

Toutes héritent de ValueError : les routers CRUD continuent d'attraper
ValueError, et main.py traduit ces erreurs en réponse JSON via status_code.
Aucune n'est fatale ; aucune n'est rejouée automatiquement.
"""

import math


class LibraryTrackError(ValueError):
    """Erreur métier affichée telle quelle à l'utilisateur (toast)."""
    status_code = 400

    def payload(self) -> dict:
        """Champs supplémentaires ajoutés au corps de la réponse."""
        return {}

    def headers(self) -> dict:
        return {}


class IdentityNotFound(LibraryTrackError):
    """Aucun étudiant ne correspond à l'identifiant scanné ou saisi."""
    status_code = 404

    def __init__(self, student_id: str):
        self.student_id = student_id
        super().__init__(
            f"Étudiant {student_id.upper()} introuvable. Veuillez d'abord vous enregistrer."
        )

    def payload(self) -> dict:
        return {"student_id": self.student_id}


class RateLimited(LibraryTrackError):
    """Le délai minimum entre deux passages du même étudiant n'est pas écoulé."""
    status_code = 429

    def __init__(self, wait_remaining: float, student_name: str = ""):
        self.wait_remaining = wait_remaining
        who = student_name or "cet étudiant"
        super().__init__(
            f"Veuillez patienter {math.ceil(wait_remaining)} s avant d'enregistrer {who} à nouveau."
        )

    def payload(self) -> dict:
        return {"wait_remaining": self.wait_remaining}

    def headers(self) -> dict:
        return {"Retry-After": str(math.ceil(self.wait_remaining))}


class NoCardDetected(LibraryTrackError):
    status_code = 422

    def __init__(self, message: str = "Aucune carte étudiant détectée sur l'image."):
        super().__init__(message)


class ExtractionFailed(LibraryTrackError):
    status_code = 422

    def __init__(self, message: str = "Impossible de lire le numéro étudiant sur la carte."):
        super().__init__(message)


class DuplicateFrame(LibraryTrackError):
    """Image identique à la dernière carte traitée : rien à faire."""
    status_code = 409

    def __init__(self):
        super().__init__("Cette carte vient déjà d'être traitée.")


class ScanBusy(LibraryTrackError):
    status_code = 409

    def __init__(self):
        super().__init__("Un scan est déjà en cours de traitement.")


class ScanningStopped(LibraryTrackError):
    status_code = 409

    def __init__(self):
        super().__init__("Le scan automatique est arrêté.")


class ConcurrentScan(LibraryTrackError):
    """Un autre poste a enregistré un passage pour cet étudiant entre-temps."""
    status_code = 409

    def __init__(self, student_id: str):
        self.student_id = student_id
        super().__init__(
            f"Un autre passage vient d'être enregistré pour {student_id.upper()}. Veuillez rescanner."
        )

    def payload(self) -> dict:
        return {"student_id": self.student_id}


class StorageError(LibraryTrackError):
    status_code = 503

    def __init__(self, message: str = "L'enregistrement a échoué. Veuillez réessayer."):
        super().__init__(message)
