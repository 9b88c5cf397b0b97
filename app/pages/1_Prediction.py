import os
import streamlit as st
from ui.theming import page_header, pill
from ui.components import (
    symptom_multiselect, disease_card, ai_analysis_panel, outbreak_panel, predictions_table,
    PRE_EXISTING_CONDITIONS, VACCINATION_OPTIONS
)

# Backend contracts
from core.models import PatientData, GENDERS
from core.ai_prediction_engine import AIPredictionEngine, validate_lookup_tables
from core.prediction_engine import get_top_predictions, get_symptom_names
from core.outbreak import calculate_outbreak_metrics
from database.database_manager import load_catalog
from services.config import load_config, log_level
from services.logging_service import LoggingService
from services.reporting import ReportingService, predictions_to_frame, REPORT_FORMATS

# --- Backend Initialization ---
@st.cache_resource
def get_config():
    return load_config()

@st.cache_resource
def get_catalog():
    return load_catalog()

@st.cache_resource
def get_engine():
    problems = validate_lookup_tables(get_catalog().disease_list)
    for table_name, unknown_ids in problems.items():
        get_logger().log_warning(f"{table_name} lists diseases missing from the catalog: {', '.join(unknown_ids)}")
    return AIPredictionEngine(clamp_probability=get_config()["prediction"]["clamp_probability"])

@st.cache_resource
def get_logger():
    config = get_config()
    return LoggingService(log_file=config["logging"]["log_file"], level=log_level(config))

@st.cache_resource
def get_reporter():
    config = get_config()
    return ReportingService(output_dir=config["reports"]["output_dir"], top_n=config["prediction"]["top_n"])

def reset_prediction_state():
    """Resets all session state variables related to a prediction run."""
    st.session_state.patient = None
    st.session_state.analysis = None
    st.session_state.outbreak = None

def run_prediction(patient: PatientData, logger: LoggingService):
    engine = get_engine()
    catalog = get_catalog()
    analysis = engine.ai_predict_disease(patient, catalog.disease_list)
    outbreak = calculate_outbreak_metrics(analysis.predictions)
    logger.log_prediction(patient, analysis, outbreak)

    st.session_state.patient = patient
    st.session_state.analysis = analysis
    st.session_state.outbreak = outbreak

def patient_form():
    catalog = get_catalog()
    with st.form("patient_form"):
        cols = st.columns(2)
        with cols[0]:
            age = st.number_input("Age", min_value=0, max_value=120, value=0, step=1)
        with cols[1]:
            gender = st.radio("Gender", GENDERS, horizontal=True, format_func=str.title)

        selected_symptoms = symptom_multiselect(catalog.symptoms)

        st.markdown("**Additional information**")
        travel_history = st.toggle("Recent travel (last 14 days)")
        conditions = st.multiselect("Pre-existing conditions", PRE_EXISTING_CONDITIONS)
        vaccination = st.selectbox(
            "Vaccination status",
            options=list(VACCINATION_OPTIONS.keys()),
            format_func=VACCINATION_OPTIONS.get,
        )

        submitted = st.form_submit_button("🔎 Analyze", type="primary", width="stretch")

    if not submitted:
        return None

    if age < 1 or not selected_symptoms:
        st.warning("Please enter valid age and select at least one symptom")
        return None

    return PatientData(
        age=int(age),
        gender=gender,
        symptoms=tuple(selected_symptoms),
        travel_history=travel_history,
        pre_existing_conditions=tuple(conditions) or None,
        vaccination_status=vaccination or None,
    )

def report_downloads(reporter: ReportingService, logger: LoggingService):
    patient = st.session_state.patient
    analysis = st.session_state.analysis
    outbreak = st.session_state.outbreak
    symptom_names = get_symptom_names(patient.symptoms, get_catalog().symptoms)

    cols = st.columns(len(REPORT_FORMATS))
    for col, fmt in zip(cols, REPORT_FORMATS):
        with col:
            if st.button(f"📄 Generate {fmt.upper()}", key=f"report_{fmt}", width="stretch"):
                try:
                    path = reporter.generate_report(patient, analysis, outbreak, format=fmt, symptom_names=symptom_names)
                except Exception as e:
                    logger.log_error(f"Failed to generate {fmt} report", e)
                    st.error(f"Failed to generate report: {e}")
                    continue
                with open(path, "rb") as f:
                    st.download_button("⬇️ Download", f.read(), file_name=os.path.basename(path), key=f"download_{fmt}")

# --- Main App Logic ---
def run():
    page_header("Prediction", "Enter patient details and symptoms for early disease detection.")
    pill("Early detection • Outbreak prediction")

    config = get_config()
    catalog = get_catalog()
    logger = get_logger()
    reporter = get_reporter()

    if 'analysis' not in st.session_state:
        reset_prediction_state()

    with st.sidebar:
        st.caption(f"Diseases: {len(catalog.diseases)} | Symptoms: {len(catalog.symptoms)}")

    # --- Input ---
    if st.session_state.analysis is None:
        patient = patient_form()
        if patient is not None:
            with st.spinner("Analyzing symptoms..."):
                try:
                    run_prediction(patient, logger)
                except Exception as e:
                    logger.log_error("Prediction failed", e)
                    st.error(f"Prediction failed: {e}")
                    return
            st.rerun()
        return

    # --- Results ---
    patient = st.session_state.patient
    analysis = st.session_state.analysis
    outbreak = st.session_state.outbreak

    cols = st.columns([1, 2])
    with cols[0]:
        if st.button("⬅️ Back to Patient Form", width="stretch"):
            reset_prediction_state()
            st.rerun()
    with cols[1]:
        st.caption(f"Results for patient: {patient.age} years, {patient.gender}")

    top = analysis.top_prediction
    if top is None:
        st.warning("⚠️ The disease catalog is empty, nothing to predict.")
        return

    tab_ai, tab_predictions, tab_outbreak = st.tabs(["🧠 AI Analysis", "🧪 Disease Predictions", "📈 Outbreak Analysis"])

    with tab_ai:
        st.subheader(f"AI-Enhanced Analysis: {top.disease.name}")
        ai_analysis_panel(analysis)

    with tab_predictions:
        top_predictions = get_top_predictions(analysis.predictions, config["prediction"]["top_n"])
        card_cols = st.columns(len(top_predictions))
        for rank, (col, prediction) in enumerate(zip(card_cols, top_predictions)):
            with col:
                disease_card(prediction, rank)
        with st.expander("All diseases"):
            predictions_table(predictions_to_frame(analysis.predictions))

    with tab_outbreak:
        outbreak_panel(outbreak, top.disease.name)

    st.divider()
    st.markdown("#### 📥 Reports")
    report_downloads(reporter, logger)

if __name__ == "__main__":
    run()
