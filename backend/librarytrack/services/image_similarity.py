"""
Comparaison approximative entre la photo de carte enregistrée et l'image scannée.

Heuristique volontairement grossière : taille totale puis fenêtre finale
identique. Ce n'est PAS une vérification d'identité (ni hash perceptuel ni
comparaison de pixels) : le résultat sert uniquement d'indication visuelle
et ne bloque jamais l'enregistrement d'un passage.
"""

import enum
from typing import Optional, Union

ImagePayload = Union[str, bytes]

SIZE_TOLERANCE = 0.05      # Écart de taille toléré (5 % de la plus grande)
WINDOW_MAX = 500           # Taille maximale de la fenêtre finale comparée
WINDOW_RATIO = 0.1         # ... limitée à 10 % de chaque image
WINDOW_MIN = 50            # En dessous : trop petit pour conclure


class MatchVerdict(str, enum.Enum):
    MATCH = "match"
    MISMATCH = "mismatch"
    INCONCLUSIVE = "inconclusive"


def compare(
    reference: Optional[ImagePayload],
    candidate: Optional[ImagePayload],
) -> MatchVerdict:
    """
    Compare deux images opaques (data URI ou octets).

    1. Une image absente → INCONCLUSIVE
    2. Contenus identiques → MATCH
    3. Tailles différentes de plus de 5 % → MISMATCH
    4. Fenêtre finale de moins de 50 unités → INCONCLUSIVE
    5. Fenêtres finales identiques → MATCH, sinon MISMATCH
    """
    if not reference or not candidate:
        return MatchVerdict.INCONCLUSIVE
    if reference == candidate:
        return MatchVerdict.MATCH

    len_ref, len_cand = len(reference), len(candidate)
    if abs(len_ref - len_cand) > max(len_ref, len_cand) * SIZE_TOLERANCE:
        return MatchVerdict.MISMATCH

    window = min(WINDOW_MAX, int(len_ref * WINDOW_RATIO), int(len_cand * WINDOW_RATIO))
    if window < WINDOW_MIN:
        return MatchVerdict.INCONCLUSIVE

    if reference[-window:] == candidate[-window:]:
        return MatchVerdict.MATCH
    return MatchVerdict.MISMATCH


def verdict_to_flag(verdict: MatchVerdict) -> Optional[bool]:
    """MATCH → True, MISMATCH → False, INCONCLUSIVE → None (colonne image_match)."""
    if verdict == MatchVerdict.MATCH:
        return True
    if verdict == MatchVerdict.MISMATCH:
        return False
    return None
