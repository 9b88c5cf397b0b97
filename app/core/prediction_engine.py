"""Base Scorer.

Scores every catalog disease against one patient with a fixed weighted sum:
- symptom match: share of the disease's symptoms the patient reports
- age risk: bracket heuristic with per-disease exceptions
- travel risk: travel history heuristic with per-disease exceptions

Each disease also gets its risk factors, an outbreak risk tier and an ordered
list of recommendations. The result list is sorted by probability (highest
first); ties keep catalog order.
"""

from __future__ import annotations

import logging
import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Sequence

from .models import Disease, PatientData, PredictionResult, Symptom

logger = logging.getLogger(__name__)

# Weights sum to 1.0, so a base probability never exceeds 100
SYMPTOM_MATCH_WEIGHT = 0.7
AGE_RISK_WEIGHT = 0.15
TRAVEL_HISTORY_WEIGHT = 0.15

CHILD_AGE_LIMIT = 12   # age < 12
ELDERLY_AGE_LIMIT = 65  # age > 65

# bracket -> (factor for listed diseases, factor for the rest, listed disease ids)
AGE_RISK_PROFILES: Dict[str, tuple] = {
    "child": (0.8, 0.2, frozenset({"measles", "common_cold"})),
    "elderly": (0.8, 0.4, frozenset({"pneumonia", "influenza"})),
}
ADULT_AGE_RISK = 0.5

NO_TRAVEL_FACTOR = 0.1
TRAVEL_RISK_DISEASES = frozenset({"dengue", "covid19"})
TRAVEL_RISK_FACTOR = 0.7
TRAVEL_DEFAULT_FACTOR = 0.3


def to_fixed(value: float, digits: int = 2) -> float:
    """Round half up on the exact binary value, like JavaScript's toFixed."""
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _age_bracket(age: int) -> str:
    if age < CHILD_AGE_LIMIT:
        return "child"
    if age > ELDERLY_AGE_LIMIT:
        return "elderly"
    return "adult"


def symptom_match_score(disease: Disease, patient_symptoms: Iterable[str]) -> float:
    """Fraction of the disease's symptoms present in the patient's symptoms."""
    if not disease.symptoms:
        return 0.0
    reported = set(patient_symptoms)
    matched = [sid for sid in disease.symptoms if sid in reported]
    return len(matched) / len(disease.symptoms)


def age_risk_factor(disease: Disease, age: int) -> float:
    bracket = _age_bracket(age)
    if bracket not in AGE_RISK_PROFILES:
        return ADULT_AGE_RISK
    listed_factor, default_factor, listed = AGE_RISK_PROFILES[bracket]
    return listed_factor if disease.id in listed else default_factor


def travel_factor(disease: Disease, travel_history: bool) -> float:
    if not travel_history:
        return NO_TRAVEL_FACTOR
    return TRAVEL_RISK_FACTOR if disease.id in TRAVEL_RISK_DISEASES else TRAVEL_DEFAULT_FACTOR


def outbreak_risk_for(disease: Disease, probability: float) -> str:
    """First matching rule wins."""
    if disease.contagiousness == "very high" and probability > 60:
        return "very high"
    if disease.contagiousness == "high" and probability > 50:
        return "high"
    if disease.contagiousness == "medium" and probability > 60:
        return "medium"
    return "low"


def risk_factors_for(patient: PatientData) -> List[str]:
    risk_factors = []
    if _age_bracket(patient.age) != "adult":
        risk_factors.append("Age-related risk")
    if patient.travel_history:
        risk_factors.append("Recent travel history")
    if patient.pre_existing_conditions:
        risk_factors.append("Pre-existing health conditions")
    return risk_factors


def recommendations_for(disease: Disease, outbreak_risk: str) -> List[str]:
    recommendations = [f"Consider testing for {disease.name}"]
    if outbreak_risk in ("high", "very high"):
        recommendations.append("Self-isolate to prevent potential spread")
        recommendations.append("Contact health authorities")
    recommendations.append("Monitor symptoms closely")
    if disease.severity in ("high", "critical"):
        recommendations.append("Seek immediate medical attention")
    return recommendations


def score_disease(disease: Disease, patient: PatientData) -> PredictionResult:
    """Build the base prediction of one disease."""
    probability = (
        symptom_match_score(disease, patient.symptoms) * SYMPTOM_MATCH_WEIGHT
        + age_risk_factor(disease, patient.age) * AGE_RISK_WEIGHT
        + travel_factor(disease, patient.travel_history) * TRAVEL_HISTORY_WEIGHT
    ) * 100

    outbreak_risk = outbreak_risk_for(disease, probability)

    return PredictionResult(
        disease=disease,
        probability=to_fixed(probability, 2),
        risk_factors=risk_factors_for(patient),
        outbreak_risk=outbreak_risk,
        recommendations=recommendations_for(disease, outbreak_risk),
    )


def sort_predictions(predictions: Iterable[PredictionResult]) -> List[PredictionResult]:
    # sorted() is stable with reverse=True, equal scores keep catalog order
    return sorted(predictions, key=lambda p: p.probability, reverse=True)


def predict_disease(
    patient: PatientData,
    diseases: Sequence[Disease],
) -> List[PredictionResult]:
    """Score all diseases for a patient.

    Args:
        patient: Patient input from the form
        diseases: Disease catalog, in catalog order

    Returns:
        One PredictionResult per disease, highest probability first.
    """
    predictions = sort_predictions(score_disease(d, patient) for d in diseases)
    if predictions:
        logger.debug(
            "Base scoring: %d diseases, top %s (%.2f)",
            len(predictions), predictions[0].disease.id, predictions[0].probability,
        )
    return predictions


def get_top_predictions(predictions: Sequence[PredictionResult], count: int = 3) -> List[PredictionResult]:
    return list(predictions[:count])


def get_symptom_names(symptom_ids: Iterable[str], symptoms: Dict[str, Symptom]) -> List[str]:
    """Names of known symptom ids, in input order. Unknown ids are skipped."""
    return [symptoms[sid].name for sid in symptom_ids if sid in symptoms]
