import streamlit as st

MUTED = "#64748b"  # slate-500

# Text colour per risk tier
RISK_COLORS = {
    "very high": "#ef4444",  # red-500
    "high": "#f97316",       # orange-500
    "medium": "#f59e0b",     # amber-500
    "low": "#3b82f6",        # blue-500
}

def page_header(title: str, subtitle: str | None = None):
    st.markdown(f"<h2 style='margin-bottom:0.2rem'>{title}</h2>", unsafe_allow_html=True)
    if subtitle:
        st.markdown(f"<p style='color:{MUTED};margin-top:0'>{subtitle}</p>", unsafe_allow_html=True)

def pill(text: str, color: str = "#2563eb"):
    st.markdown(
        f"""
        <span style="
          padding:4px 10px;border-radius:9999px;
          background:{color}1f;color:{color};
          font-size:0.85rem;">{text}</span>
        """,
        unsafe_allow_html=True
    )

def risk_pill(risk_level: str, suffix: str = "Risk"):
    pill(f"{risk_level.title()} {suffix}", RISK_COLORS.get(risk_level, RISK_COLORS["low"]))
