import streamlit as st
import pandas as pd
from typing import List, Dict, Optional

from core.models import AIAnalysis, OutbreakMetrics, PredictionResult, Symptom
from core.outbreak import RISK_PROGRESS, outbreak_recommended_actions
from ui.theming import risk_pill, RISK_COLORS

# Marked with * in the symptom picker
CRITICAL_SYMPTOMS = {"fever", "cough", "shortness_of_breath", "loss_of_taste", "chest_pain"}

PRE_EXISTING_CONDITIONS = [
    "Diabetes", "Hypertension", "Asthma", "Heart disease",
    "Chronic lung disease", "Immunocompromised",
]

VACCINATION_OPTIONS = {
    "": "Not specified",
    "fully_vaccinated": "Fully vaccinated",
    "partially_vaccinated": "Partially vaccinated",
    "not_vaccinated": "Not vaccinated",
}

def confidence_color(score: float) -> str:
    if score >= 80:
        return "#16a34a"
    if score >= 60:
        return "#2563eb"
    if score >= 40:
        return "#d97706"
    return "#dc2626"

def symptom_multiselect(symptoms: Dict[str, Symptom], default_ids: Optional[List[str]] = None) -> List[str]:
    def label(sid: str) -> str:
        name = symptoms[sid].name
        return f"{name} *" if sid in CRITICAL_SYMPTOMS else name

    selected = st.multiselect(
        "Symptoms",
        options=list(symptoms.keys()),
        default=[sid for sid in (default_ids or []) if sid in symptoms],
        format_func=label,
        help="Select all symptoms that apply.",
    )
    st.caption("Items marked with * are critical symptoms for certain diseases")
    return selected

def disease_card(prediction: PredictionResult, rank: int):
    disease = prediction.disease
    with st.container(border=True):
        st.markdown(f"#### {rank + 1}. {disease.name}")
        st.caption(disease.description)
        st.progress(min(int(prediction.probability), 100) / 100, text=f"Probability: {prediction.probability:.2f}%")
        risk_pill(prediction.outbreak_risk, "Outbreak Risk")

        st.write(f"**Severity:** {disease.severity.title()} • **Contagiousness:** {disease.contagiousness.title()}")
        st.write(f"**Incubation:** {disease.incubation_period}")

        if prediction.risk_factors:
            st.markdown("**Risk factors:**")
            for factor in prediction.risk_factors:
                st.write(f"- {factor}")

        with st.expander("Recommendations"):
            for recommendation in prediction.recommendations:
                st.write(f"- {recommendation}")
            st.info(f"**Treatment:** {disease.treatment_approach}")

def ai_analysis_panel(analysis: AIAnalysis):
    top = analysis.top_prediction
    metrics = analysis.regional_risk_metrics
    if top is None or metrics is None:
        return

    score = analysis.ai_confidence_score
    st.markdown(
        f"**AI Confidence Score:** <span style='color:{confidence_color(score)};font-weight:700'>{score:.1f}%</span>",
        unsafe_allow_html=True,
    )
    st.progress(min(max(score, 0.0), 100.0) / 100)

    cols = st.columns(3)
    cols[0].metric("Transmission rate", f"{metrics.transmission_rate:.1f}")
    cols[1].metric("Potential cases / week", metrics.potential_cases_per_week)
    cols[2].metric("Early detection confidence", f"{metrics.early_detection_confidence}%")

    cols = st.columns(3)
    with cols[0]:
        st.caption("Geographical spread")
        risk_pill(metrics.geographical_spread_risk)
    cols[1].metric("Early intervention window", metrics.early_intervention_window)
    cols[2].metric("Recent similar cases", metrics.recent_similar_cases)

    st.markdown("**Demographic risk groups:**")
    for group in metrics.demographic_risk_groups:
        st.write(f"- {group}")

def outbreak_panel(outbreak: OutbreakMetrics, disease_name: str):
    st.subheader(f"Outbreak Analysis for {disease_name}")
    color = RISK_COLORS.get(outbreak.risk_level, RISK_COLORS["low"])
    st.markdown(
        f"Current risk: <span style='color:{color};font-weight:700'>{outbreak.risk_level.title()}</span>",
        unsafe_allow_html=True,
    )
    st.progress(RISK_PROGRESS.get(outbreak.risk_level, 25) / 100)

    cols = st.columns(3)
    cols[0].metric("Spread rate (R₀)", f"{outbreak.spread_rate:.1f}")
    cols[1].metric("Potential affected population", f"{outbreak.affected_population_estimate:,}")
    cols[2].metric("Time to containment", outbreak.time_to_containment)

    st.markdown("**Recommended actions:**")
    for action in outbreak_recommended_actions(outbreak.risk_level):
        st.write(f"- {action}")

def predictions_table(frame: pd.DataFrame):
    st.dataframe(frame, width="stretch", hide_index=True)
