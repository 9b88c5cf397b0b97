import streamlit as st

from database.database_manager import load_catalog
from services.config import load_config as read_config

@st.cache_resource
def load_config():
    return read_config()

CONFIG = load_config()
CATALOG = load_catalog()

st.set_page_config(
    page_title=CONFIG["app"]["name"],
    page_icon=CONFIG["app"]["page_icon"],
    layout="wide",
    initial_sidebar_state="expanded"
)

# Sidebar is informational only, navigation comes from pages/
st.sidebar.title(f"{CONFIG['app']['page_icon']} {CONFIG['app']['name']}")
st.sidebar.caption("Frontend GUI – Streamlit")

st.sidebar.divider()
st.sidebar.markdown("### ⚙️ Configuration")
st.sidebar.info(f"**Predictions shown:** top {CONFIG['prediction']['top_n']}")
st.sidebar.info(f"**Clamp probability:** {'on' if CONFIG['prediction']['clamp_probability'] else 'off'}")
st.sidebar.info(f"**Log file:** `{CONFIG['logging']['log_file']}`")

# Main page content
st.title("🩺 Disease Prediction & Outbreak Analysis")
st.markdown("### Early detection system for disease outbreaks")

col1, col2 = st.columns([2, 1])

with col1:
    st.markdown("""
    Enter a patient's age, symptoms and history to get a ranked list of candidate
    diseases together with illustrative outbreak statistics.

    #### 🎯 How it works:
    1. **Select the symptoms** the patient reports
    2. Add **travel history**, **pre-existing conditions** and **vaccination status**
    3. The base scorer weighs symptom match, age and travel history
    4. The enhancement pass applies early symptom patterns and seasonal factors
    5. **Review** the AI analysis, disease cards and outbreak analysis tabs
    """)

with col2:
    st.info(f"""
    **📊 Catalog**

    - 🔴 **{len(CATALOG.symptoms)} Symptoms**
    - 🟢 **{len(CATALOG.diseases)} Diseases**
    """)

    st.success("✅ System ready")
    st.caption("Open **Prediction** in the sidebar to start")

st.divider()

st.markdown("### 🚀 Features")

feature_cols = st.columns(4)

with feature_cols[0]:
    st.markdown("#### 🔍 Early Detection")
    st.markdown("Flag likely diseases from early symptom patterns.")

with feature_cols[1]:
    st.markdown("#### 🛡️ Preventative Action")
    st.markdown("Isolation and testing advice per candidate disease.")

with feature_cols[2]:
    st.markdown("#### 🧠 AI Analysis")
    st.markdown("Confidence score and regional risk metrics for the top result.")

with feature_cols[3]:
    st.markdown("#### 📄 Reports")
    st.markdown("Download the result as TXT, PDF or CSV.")

st.divider()

st.markdown("### 🦠 Diseases in the Catalog")

disease_cols = st.columns(2)
for i, disease in enumerate(CATALOG.diseases.values()):
    with disease_cols[i % 2]:
        with st.expander(f"{disease.name} ({disease.severity} severity)"):
            st.write(disease.description)
            st.caption(f"Contagiousness: {disease.contagiousness} • Incubation: {disease.incubation_period}")

st.divider()

st.caption("""
**Disclaimer:** all figures are hand-authored heuristics for illustration only.
This tool does not replace a medical diagnosis.
""")
