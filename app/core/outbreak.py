"""Outbreak metrics summarizer.

Maps the outbreak risk tier of the top prediction to fixed population,
spread and containment figures for the outbreak view.
"""

from typing import Dict, List, Sequence

from .models import OutbreakMetrics, PredictionResult

# risk tier -> (affected population estimate, spread rate, time to containment)
OUTBREAK_PROFILES: Dict[str, tuple] = {
    "very high": (5000, 3.2, "3-6 months"),
    "high": (2000, 2.1, "2-4 months"),
    "medium": (500, 1.5, "1-2 months"),
    "low": (50, 0.8, "2-3 weeks"),
}

# Gauge value shown for each tier
RISK_PROGRESS: Dict[str, int] = {
    "very high": 95,
    "high": 75,
    "medium": 50,
    "low": 25,
}

EMPTY_OUTBREAK_METRICS = OutbreakMetrics(
    risk_level="low",
    affected_population_estimate=0,
    spread_rate=0,
    time_to_containment="N/A",
)


def calculate_outbreak_metrics(predictions: Sequence[PredictionResult]) -> OutbreakMetrics:
    """Summarize the top prediction's outbreak risk.

    Args:
        predictions: Predictions sorted highest first (may be empty)

    Returns:
        OutbreakMetrics; zeroed values with 'N/A' containment when empty.
    """
    if not predictions:
        return EMPTY_OUTBREAK_METRICS

    risk_level = predictions[0].outbreak_risk
    population, spread_rate, containment = OUTBREAK_PROFILES[risk_level]

    return OutbreakMetrics(
        risk_level=risk_level,
        affected_population_estimate=population,
        spread_rate=spread_rate,
        time_to_containment=containment,
    )


def outbreak_recommended_actions(risk_level: str) -> List[str]:
    actions = [
        "Monitor close contacts for symptoms",
        "Implement enhanced hygiene protocols",
    ]
    if risk_level in ("high", "very high"):
        actions.append("Alert local health authorities")
    return actions
