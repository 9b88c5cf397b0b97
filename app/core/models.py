# File: core/models.py

from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional, Tuple

SEVERITY_LEVELS = ("low", "medium", "high", "critical")
RISK_LEVELS = ("low", "medium", "high", "very high")  # contagiousness and outbreak risk tiers
GENDERS = ("male", "female", "other")

# 1-4 score per risk tier, used by the spread risk product
RISK_SCORES: Dict[str, int] = {"low": 1, "medium": 2, "high": 3, "very high": 4}


@dataclass(frozen=True)
class Symptom:
    """One observable symptom from the static catalog."""
    id: str
    name: str
    description: str = ""


@dataclass(frozen=True)
class Disease:
    """One candidate disease from the static catalog."""
    id: str
    name: str
    description: str
    symptoms: Tuple[str, ...]
    severity: str
    contagiousness: str
    incubation_period: str
    treatment_approach: str


@dataclass(frozen=True)
class PatientData:
    """Patient input for one submission. Built once by the form, never changed."""
    age: int
    gender: str
    symptoms: Tuple[str, ...]
    travel_history: bool = False
    pre_existing_conditions: Optional[Tuple[str, ...]] = None
    vaccination_status: Optional[str] = None

    def __post_init__(self):
        # Symptom ids behave as a set, but keep the order they were picked in
        object.__setattr__(self, "symptoms", tuple(dict.fromkeys(self.symptoms or ())))
        object.__setattr__(self, "travel_history", bool(self.travel_history))
        conditions = tuple(self.pre_existing_conditions or ())
        object.__setattr__(self, "pre_existing_conditions", conditions or None)
        object.__setattr__(self, "vaccination_status", self.vaccination_status or None)


@dataclass(frozen=True)
class PredictionResult:
    """Score of one disease for one scoring run."""
    disease: Disease
    probability: float
    risk_factors: List[str] = field(default_factory=list)
    outbreak_risk: str = "low"
    recommendations: List[str] = field(default_factory=list)

    def to_row(self) -> Dict[str, Any]:
        """Flatten to a dict for tables and exports."""
        return {
            "disease_id": self.disease.id,
            "disease": self.disease.name,
            "probability": self.probability,
            "outbreak_risk": self.outbreak_risk,
            "severity": self.disease.severity,
            "contagiousness": self.disease.contagiousness,
            "risk_factors": "; ".join(self.risk_factors),
            "recommendations": "; ".join(self.recommendations),
        }


@dataclass(frozen=True)
class RegionalRiskMetrics:
    """Illustrative spread statistics for the top-ranked disease."""
    transmission_rate: float
    potential_cases_per_week: int
    early_detection_confidence: int
    geographical_spread_risk: str
    demographic_risk_groups: List[str]
    early_intervention_window: str
    recent_similar_cases: int


@dataclass(frozen=True)
class AIAnalysis:
    """Output of the enhancement layer."""
    predictions: List[PredictionResult]
    ai_confidence_score: float
    regional_risk_metrics: Optional[RegionalRiskMetrics] = None

    @property
    def top_prediction(self) -> Optional[PredictionResult]:
        return self.predictions[0] if self.predictions else None


@dataclass(frozen=True)
class OutbreakMetrics:
    risk_level: str
    affected_population_estimate: int
    spread_rate: float
    time_to_containment: str


@dataclass
class Catalog:
    """Container for the loaded symptom and disease catalogs."""
    symptoms: Dict[str, Symptom]
    diseases: Dict[str, Disease]

    @property
    def disease_list(self) -> List[Disease]:
        return list(self.diseases.values())
