"""
Normalisation du résultat OCR en formulaire d'enregistrement.

Fonctions pures, pilotées par tables : aucun appel réseau. Un champ absent ou
non reconnu prend sa valeur par défaut, jamais d'exception.
"""

import re
from typing import Dict, Optional

from qrattendance.schemas.ocr import OcrResult
from qrattendance.schemas.student import (
    DEFAULT_CLASS,
    DEFAULT_GENDER,
    DEFAULT_SCHOOL_NAME,
    DEFAULT_SECTION,
    FALLBACK_VALUE,
    StudentDetails,
)

_TOKEN_RE = re.compile(r"[a-z0-9]+")

_ROMAN = ["i", "ii", "iii", "iv", "v", "vi", "vii", "viii", "ix", "x", "xi", "xii"]
_WORDS = [
    "one", "two", "three", "four", "five", "six",
    "seven", "eight", "nine", "ten", "eleven", "twelve",
]
_SUFFIXES = {1: "st", 2: "nd", 3: "rd"}


def _ordinal(n: int) -> str:
    return f"{n}{_SUFFIXES.get(n, 'th')}"


def _build_class_aliases() -> Dict[str, str]:
    aliases = {
        "nursery": "Nursery",
        "nur": "Nursery",
        "lkg": "LKG",
        "ukg": "UKG",
    }
    for n in range(1, 13):
        canonical = _ordinal(n)
        for alias in (str(n), canonical, _ROMAN[n - 1], _WORDS[n - 1]):
            aliases[alias] = canonical
    return aliases


CLASS_ALIASES = _build_class_aliases()

# Ordre significatif : "female" est testé avant "male"
GENDER_ALIASES = (
    ("Female", {"female", "girl", "f", "g"}),
    ("Male", {"male", "boy", "m", "b"}),
    ("Other", {"other"}),
)


def normalize_class(raw: Optional[str]) -> str:
    """Ramène "Class 10", "X", "10th std" à une valeur de CLASS_OPTIONS, sinon Unknown."""
    for token in _TOKEN_RE.findall((raw or "").lower()):
        if token in CLASS_ALIASES:
            return CLASS_ALIASES[token]
    return DEFAULT_CLASS


def normalize_gender(raw: Optional[str]) -> str:
    tokens = set(_TOKEN_RE.findall((raw or "").lower()))
    for canonical, aliases in GENDER_ALIASES:
        if tokens & aliases:
            return canonical
    return DEFAULT_GENDER


def _text_or(raw: Optional[str], default: str) -> str:
    value = (raw or "").strip()
    return value or default


def normalize_ocr_result(result: OcrResult) -> StudentDetails:
    return StudentDetails(
        name=_text_or(result.name, FALLBACK_VALUE),
        father_name=_text_or(result.father_name, FALLBACK_VALUE),
        school_name=_text_or(result.school_name, DEFAULT_SCHOOL_NAME),
        class_name=normalize_class(result.class_name),
        section=_text_or(result.section, DEFAULT_SECTION),
        roll_number=_text_or(result.roll_number, FALLBACK_VALUE),
        gender=normalize_gender(result.gender),
    )
