"""
Tests unitaires pour la normalisation des résultats OCR.
Couverture : classe (chiffres, ordinaux, romains, mots), genre, valeurs par défaut.
"""

import pytest

from qrattendance.schemas.ocr import OcrResult
from qrattendance.schemas.student import CLASS_OPTIONS
from qrattendance.services.ocr_normalizer import normalize_class, normalize_gender, normalize_ocr_result


@pytest.mark.parametrize("raw,expected", [
    ("10", "10th"),
    ("Class 10", "10th"),
    ("10th Std", "10th"),
    ("X", "10th"),
    ("Class V-A", "5th"),
    ("one", "1st"),
    ("2nd", "2nd"),
    ("12", "12th"),
    ("UKG", "UKG"),
    ("Nursery", "Nursery"),
    ("Primary", "Unknown"),
    ("", "Unknown"),
    (None, "Unknown"),
])
def test_normalize_class(raw, expected):
    assert normalize_class(raw) == expected


def test_classes_normalisees_dans_les_options():
    for raw in ("1", "iv", "seven", "11", "lkg"):
        assert normalize_class(raw) in CLASS_OPTIONS


@pytest.mark.parametrize("raw,expected", [
    ("Female", "Female"),
    ("FEMALE", "Female"),
    ("Girl", "Female"),
    ("F", "Female"),
    ("Male", "Male"),
    ("boy", "Male"),
    ("M", "Male"),
    ("Other", "Other"),
    ("n/a", "Unknown"),
    (None, "Unknown"),
])
def test_normalize_gender(raw, expected):
    assert normalize_gender(raw) == expected


def test_resultat_vide_valeurs_par_defaut():
    details = normalize_ocr_result(OcrResult())

    assert details.name == "N/A"
    assert details.father_name == "N/A"
    assert details.school_name == "Smart School"
    assert details.class_name == "Unknown"
    assert details.section == "Unknown"
    assert details.roll_number == "N/A"
    assert details.gender == "Unknown"


def test_resultat_complet():
    raw = OcrResult.model_validate({
        "name": "  Asha Verma ",
        "father_name": "Ravi Verma",
        "school_name": "Central High School",
        "class": "Class 7",
        "section": "B",
        "roll_number": "12345",
        "gender": "girl",
    })

    details = normalize_ocr_result(raw)

    assert details.name == "Asha Verma"
    assert details.school_name == "Central High School"
    assert details.class_name == "7th"
    assert details.section == "B"
    assert details.roll_number == "12345"
    assert details.gender == "Female"
    assert details.model_dump(by_alias=True)["class"] == "7th"
