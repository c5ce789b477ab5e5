"""
Client de l'IA générative (Gemini, API REST generateContent).

Deux usages :
- détection : l'image montre-t-elle une carte d'identité / carte de bibliothèque ?
- extraction : numéro étudiant (poste de scan) ou tous les champs (enregistrement)

Les réponses sont contraintes par un schéma JSON. Un champ absent signifie
« non déterminé avec certitude » : l'IA ne doit jamais deviner.
"""

import json
import logging
from typing import Optional, Tuple

import requests
from fastapi import Depends
from sqlalchemy.orm import Session

from librarytrack.config import settings
from librarytrack.database import get_db
from librarytrack.exceptions import ExtractionFailed
from librarytrack.schemas.scan import CardDetection
from librarytrack.schemas.student import ExtractedIdData
from librarytrack.services import admin_service

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "image/jpeg"

DETECT_PROMPT = (
    "Does this image mainly show an ID card, library card, driver's license or a similar "
    "identification document (card shape, printed name or ID number, photo, barcode)? "
    "Ignore walls, desks, people without a visible card and blurry scenes. "
    "Answer only with the isIdCard field."
)

SCAN_ID_PROMPT = (
    "Extract the student ID number printed directly below the barcode on this card. "
    "If you cannot read it with confidence, return an empty string. Never guess and "
    "never return another number from the card."
)

CARD_FIELDS_PROMPT = (
    "This is a student ID card. Extract: the student ID number (near the barcode), the "
    "full name, the branch or department, the enroll number and the year of study "
    "(FY, SY or TY). Leave a field empty when it is not clearly visible. Never guess."
)

DETECT_SCHEMA = {
    "type": "OBJECT",
    "properties": {"isIdCard": {"type": "BOOLEAN"}},
    "required": ["isIdCard"],
}

SCAN_ID_SCHEMA = {
    "type": "OBJECT",
    "properties": {"idNumber": {"type": "STRING"}},
    "required": ["idNumber"],
}

CARD_FIELDS_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "idNumber": {"type": "STRING"},
        "studentName": {"type": "STRING"},
        "branch": {"type": "STRING"},
        "enrollNo": {"type": "STRING"},
        "yearOfStudy": {"type": "STRING"},
    },
    "required": ["idNumber"],
}


def split_data_uri(image: str) -> Tuple[str, str]:
    """
    'data:image/png;base64,AAAA' → ('image/png', 'AAAA').
    Une chaîne sans préfixe est considérée comme du base64 JPEG brut.
    """
    if not image.startswith("data:"):
        return DEFAULT_MIME_TYPE, image
    header, sep, data = image.partition(",")
    if not sep or ";base64" not in header or not data:
        raise ExtractionFailed("Format d'image invalide : data URI base64 attendu.")
    mime_type = header[len("data:"):].split(";")[0] or DEFAULT_MIME_TYPE
    return mime_type, data


class GeminiClient:
    def __init__(
        self,
        api_key: str,
        model: Optional[str] = None,
        api_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.api_key = api_key
        self.model = model or settings.GEMINI_MODEL
        self.api_url = (api_url or settings.GEMINI_API_URL).rstrip("/")
        self.timeout = timeout or settings.GEMINI_TIMEOUT_SECONDS

    def _generate(self, prompt: str, image: str, schema: dict) -> dict:
        """Appel generateContent avec réponse JSON. Lève ExtractionFailed en cas d'échec."""
        if not self.api_key:
            raise ExtractionFailed("Clé API Gemini non configurée.")

        mime_type, data = split_data_uri(image)
        payload = {
            "contents": [{
                "parts": [
                    {"text": prompt},
                    {"inlineData": {"mimeType": mime_type, "data": data}},
                ],
            }],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": schema,
            },
        }

        try:
            response = requests.post(
                f"{self.api_url}/models/{self.model}:generateContent",
                params={"key": self.api_key},
                json=payload,
                timeout=self.timeout,
            )
            response.raise_for_status()
            text = response.json()["candidates"][0]["content"]["parts"][0]["text"]
            result = json.loads(text)
        except requests.RequestException as exc:
            logger.warning("Appel Gemini en échec : %s", exc)
            raise ExtractionFailed("Le service d'analyse d'image est indisponible.") from exc
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            logger.warning("Réponse Gemini inexploitable : %s", exc)
            raise ExtractionFailed("Réponse inattendue du service d'analyse d'image.") from exc

        if not isinstance(result, dict):
            raise ExtractionFailed("Réponse inattendue du service d'analyse d'image.")
        return result

    def detect_id_card(self, image: str) -> CardDetection:
        """En cas d'erreur, l'image est considérée comme ne contenant pas de carte."""
        try:
            result = self._generate(DETECT_PROMPT, image, DETECT_SCHEMA)
        except ExtractionFailed as exc:
            logger.warning("Détection de carte impossible, image ignorée : %s", exc)
            return CardDetection(is_id_card=False)
        return CardDetection(is_id_card=result.get("isIdCard") is True)

    def extract_scan_id(self, image: str) -> ExtractedIdData:
        result = self._generate(SCAN_ID_PROMPT, image, SCAN_ID_SCHEMA)
        return ExtractedIdData(id_number=result.get("idNumber"))

    def extract_card_fields(self, image: str) -> ExtractedIdData:
        result = self._generate(CARD_FIELDS_PROMPT, image, CARD_FIELDS_SCHEMA)
        return ExtractedIdData(
            id_number=result.get("idNumber"),
            student_name=result.get("studentName"),
            branch=result.get("branch"),
            enroll_no=result.get("enrollNo"),
            year_of_study=result.get("yearOfStudy"),
        )


def get_gemini_client(db: Session = Depends(get_db)) -> GeminiClient:
    """Dépendance FastAPI: client configuré avec la clé API courante (base puis .env)."""
    return GeminiClient(api_key=admin_service.get_api_key(db))
