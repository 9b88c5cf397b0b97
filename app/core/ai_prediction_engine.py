"""AI-enhanced prediction layer.

Wraps the base scorer and adjusts its output with fixed heuristics:
- early indicator patterns: boost diseases whose early symptoms are present
- seasonal factor: monthly multiplier for seasonal diseases
- isolation advice for diseases with a high outbreak risk

It also derives an aggregate confidence score and illustrative regional
risk metrics from the top-ranked prediction. The wall clock and the random
source are injected so a run can be made fully deterministic.
"""

from __future__ import annotations

import dataclasses
import logging
import math
import random
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from .models import (
    AIAnalysis, Disease, PatientData, PredictionResult, RegionalRiskMetrics, RISK_SCORES
)
from .prediction_engine import predict_disease, round_half_up, sort_predictions, to_fixed

logger = logging.getLogger(__name__)

# disease id -> early symptom subset and point boost
EARLY_INDICATOR_PATTERNS: Dict[str, Dict] = {
    "covid19": {"symptoms": ("fatigue", "loss_of_taste", "loss_of_smell"), "boost": 15},
    "influenza": {"symptoms": ("fatigue", "body_ache", "chills"), "boost": 12},
    "pneumonia": {"symptoms": ("fatigue", "shortness_of_breath"), "boost": 10},
    "measles": {"symptoms": ("fever", "cold"), "boost": 8},
    "dengue": {"symptoms": ("fever", "joint_pain", "body_ache"), "boost": 18},
}

# January first
SEASONAL_FACTORS: Dict[str, tuple] = {
    "influenza": (1.4, 1.3, 1.1, 0.9, 0.7, 0.6, 0.6, 0.7, 0.9, 1.0, 1.2, 1.3),
    "common_cold": (1.3, 1.2, 1.1, 1.0, 0.9, 0.8, 0.8, 0.9, 1.0, 1.1, 1.2, 1.3),
    "pneumonia": (1.2, 1.2, 1.1, 0.9, 0.8, 0.8, 0.8, 0.8, 0.9, 1.0, 1.1, 1.2),
    "dengue": (0.8, 0.8, 0.9, 1.0, 1.2, 1.3, 1.4, 1.3, 1.2, 1.0, 0.9, 0.8),
}

# days
ISOLATION_PERIODS: Dict[str, int] = {
    "covid19": 7,
    "influenza": 5,
    "measles": 14,
    "pneumonia": 7,
    "common_cold": 3,
    "strep_throat": 2,
    "gastroenteritis": 2,
}
DEFAULT_ISOLATION_PERIOD = 5

TRANSMISSION_RATES: Dict[str, float] = {
    "low": 0.8,
    "medium": 1.5,
    "high": 2.3,
    "very high": 3.5,
}

DEMOGRAPHIC_RISK_GROUPS: Dict[str, tuple] = {
    "covid19": ("Elderly (65+)", "Immunocompromised individuals", "People with respiratory conditions"),
    "influenza": ("Young children", "Elderly (65+)", "Pregnant women"),
    "pneumonia": ("Elderly (65+)", "Young children", "People with chronic lung diseases"),
    "measles": ("Unvaccinated children", "Pregnant women", "Immunocompromised individuals"),
    "dengue": ("Children and young adults", "Previously infected individuals (risk of severe dengue)"),
}
DEFAULT_RISK_GROUPS = ("General population",)

# Keyed by the literal incubation period text, not by disease id
INTERVENTION_WINDOWS: Dict[str, str] = {
    "1-3 days": "24-48 hours",
    "2-5 days": "48-72 hours",
    "1-4 days": "24-72 hours",
    "2-14 days": "3-5 days",
    "4-10 days": "2-4 days",
    "10-14 days": "5-7 days",
}
DEFAULT_INTERVENTION_WINDOW = "3-5 days"

EARLY_PATTERN_RISK_FACTOR = "Early symptom pattern detected"
EARLY_PATTERN_RECOMMENDATION = "Early symptom pattern suggests monitoring for disease progression"

LOOKUP_TABLES = {
    "EARLY_INDICATOR_PATTERNS": EARLY_INDICATOR_PATTERNS,
    "SEASONAL_FACTORS": SEASONAL_FACTORS,
    "ISOLATION_PERIODS": ISOLATION_PERIODS,
    "DEMOGRAPHIC_RISK_GROUPS": DEMOGRAPHIC_RISK_GROUPS,
}


def get_early_disease_indicators(disease_id: str, patient_symptoms: Iterable[str]) -> Dict[str, object]:
    """Check a disease's early symptom pattern against the patient's symptoms.

    A pattern counts as detected when at least half of its symptoms
    (rounded up) are reported.

    Returns:
        dict with keys ``detected`` (bool) and ``confidence_boost`` (points).
    """
    pattern = EARLY_INDICATOR_PATTERNS.get(disease_id)
    if not pattern:
        return {"detected": False, "confidence_boost": 0}

    reported = set(patient_symptoms)
    matched = [s for s in pattern["symptoms"] if s in reported]
    detected = len(matched) >= math.ceil(len(pattern["symptoms"]) / 2)

    return {
        "detected": detected,
        "confidence_boost": pattern["boost"] if detected else 0,
    }


def calculate_seasonal_factor(disease_id: str, month: int) -> float:
    """Monthly multiplier; month is 1-based. Diseases without a table use 1.0."""
    factors = SEASONAL_FACTORS.get(disease_id)
    if not factors:
        return 1.0
    return factors[month - 1]


def get_recommended_isolation_period(disease_id: str) -> int:
    return ISOLATION_PERIODS.get(disease_id, DEFAULT_ISOLATION_PERIOD)


def get_demographic_risk_groups(disease_id: str, age: int) -> List[str]:
    risk_groups = list(DEMOGRAPHIC_RISK_GROUPS.get(disease_id, DEFAULT_RISK_GROUPS))
    if age < 12:
        risk_groups.append("School-aged children")
    elif age >= 65:
        risk_groups.append("Senior communities")
    return risk_groups


def get_early_intervention_window(incubation_period: str) -> str:
    return INTERVENTION_WINDOWS.get(incubation_period, DEFAULT_INTERVENTION_WINDOW)


def early_detection_confidence_for(probability: float) -> int:
    if probability < 50:
        return 60
    if probability < 70:
        return 75
    if probability < 85:
        return 85
    return 95


def spread_risk_level(spread_risk_score: int) -> str:
    if spread_risk_score <= 3:
        return "low"
    if spread_risk_score <= 6:
        return "medium"
    if spread_risk_score <= 12:
        return "high"
    return "very high"


def calculate_ai_confidence_score(
    predictions: Sequence[PredictionResult],
    patient: PatientData,
) -> float:
    """Aggregate confidence (0-100) in the top-ranked prediction."""
    if not predictions:
        return 0.0

    top = predictions[0]
    confidence_score = top.probability * 0.7

    # Symptom coverage bonus, up to 20 points
    disease_symptom_count = len(top.disease.symptoms)
    if disease_symptom_count:
        coverage_ratio = len(patient.symptoms) / disease_symptom_count
        confidence_score += min(coverage_ratio * 20, 20)

    # Ambiguity penalty when the runner-up is close
    if len(predictions) > 1:
        probability_gap = top.probability - predictions[1].probability
        if probability_gap < 10:
            confidence_score -= (10 - probability_gap) * 0.5

    if patient.pre_existing_conditions:
        confidence_score += 5
    if patient.vaccination_status:
        confidence_score += 5

    return min(max(confidence_score, 0.0), 100.0)


def validate_lookup_tables(diseases: Iterable[Disease]) -> Dict[str, List[str]]:
    """Report table keys that do not name a catalog disease.

    Returns:
        mapping table name -> unknown disease ids (only tables with problems)
    """
    known = {d.id for d in diseases}
    problems = {}
    for table_name, table in LOOKUP_TABLES.items():
        unknown = sorted(k for k in table if k not in known)
        if unknown:
            problems[table_name] = unknown
    return problems


class AIPredictionEngine:
    """Enhancement layer on top of the base scorer.

    Args:
        clock: zero-argument callable returning the current datetime
        rng: random source for the simulated recent case count
        clamp_probability: clamp adjusted probabilities to [0, 100]
    """

    def __init__(
        self,
        clock: Optional[Callable[[], datetime]] = None,
        rng: Optional[random.Random] = None,
        clamp_probability: bool = False,
    ):
        self.clock = clock or datetime.now
        self.rng = rng or random.Random()
        self.clamp_probability = clamp_probability

    def current_month(self) -> int:
        return self.clock().month

    def ai_predict_disease(self, patient: PatientData, diseases: Sequence[Disease]) -> AIAnalysis:
        """Run base scoring, then the enhancement pass.

        Args:
            patient: Patient input from the form
            diseases: Disease catalog, in catalog order

        Returns:
            AIAnalysis with re-sorted predictions, the confidence score and
            regional metrics (None when the catalog is empty).
        """
        base_predictions = predict_disease(patient, diseases)
        return self.enhance(base_predictions, patient)

    def enhance(self, base_predictions: Sequence[PredictionResult], patient: PatientData) -> AIAnalysis:
        month = self.current_month()
        enhanced = sort_predictions(
            self._enhance_prediction(p, patient, month) for p in base_predictions
        )

        confidence = calculate_ai_confidence_score(enhanced, patient)
        regional = self.generate_regional_risk_metrics(enhanced[0], patient) if enhanced else None

        if enhanced:
            logger.debug(
                "Enhanced scoring (month %d): top %s (%.2f), confidence %.2f",
                month, enhanced[0].disease.id, enhanced[0].probability, confidence,
            )

        return AIAnalysis(
            predictions=enhanced,
            ai_confidence_score=confidence,
            regional_risk_metrics=regional,
        )

    def _enhance_prediction(
        self,
        prediction: PredictionResult,
        patient: PatientData,
        month: int,
    ) -> PredictionResult:
        disease_id = prediction.disease.id
        probability = prediction.probability
        risk_factors = list(prediction.risk_factors)
        recommendations = list(prediction.recommendations)

        indicators = get_early_disease_indicators(disease_id, patient.symptoms)
        if indicators["detected"]:
            probability += indicators["confidence_boost"]
            risk_factors.append(EARLY_PATTERN_RISK_FACTOR)
            recommendations.insert(0, EARLY_PATTERN_RECOMMENDATION)

        probability *= calculate_seasonal_factor(disease_id, month)

        if prediction.outbreak_risk in ("high", "very high"):
            days = get_recommended_isolation_period(disease_id)
            recommendations.append(f"Isolate for at least {days} days to prevent spread")

        probability = to_fixed(probability, 2)
        if self.clamp_probability:
            probability = min(max(probability, 0.0), 100.0)

        return dataclasses.replace(
            prediction,
            probability=probability,
            risk_factors=risk_factors,
            recommendations=recommendations,
        )

    def generate_regional_risk_metrics(
        self,
        top_prediction: PredictionResult,
        patient: PatientData,
    ) -> RegionalRiskMetrics:
        """Illustrative spread statistics for the top-ranked disease."""
        disease = top_prediction.disease
        transmission_rate = TRANSMISSION_RATES[disease.contagiousness]

        spread_risk_score = RISK_SCORES[disease.contagiousness] * RISK_SCORES[top_prediction.outbreak_risk]

        recent_similar_cases = round_half_up(spread_risk_score * 5 + self.rng.random() * 20)

        return RegionalRiskMetrics(
            transmission_rate=transmission_rate,
            potential_cases_per_week=round_half_up(transmission_rate ** 2 * 10),
            early_detection_confidence=early_detection_confidence_for(top_prediction.probability),
            geographical_spread_risk=spread_risk_level(spread_risk_score),
            demographic_risk_groups=get_demographic_risk_groups(disease.id, patient.age),
            early_intervention_window=get_early_intervention_window(disease.incubation_period),
            recent_similar_cases=recent_similar_cases,
        )
