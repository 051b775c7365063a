"""
Exam Results Dashboard - Workbook Edition

Interactive Streamlit dashboard over the year-group results workbooks.

Features:
- Year group selector (or upload a results workbook directly)
- Headline KPIs: Overall % 1–6 / 1–8, Total Candidates, No. of Subjects
- Per-class chart for one subject and a subject comparison chart
- Metric selector: % 1–6 or % 1–8
"""

import streamlit as st
import plotly.graph_objects as go

from config import (
    DEFAULT_METRIC,
    DEFAULT_YEAR,
    METRIC_COLORS,
    METRICS,
    PERCENT_AXIS_RANGE,
    YEAR_FILES,
)
from load_data import records_to_dataframe
from session import STATUS_LOAD_ERROR, STATUS_NO_RECORDS, ResultsSession

# Page configuration
st.set_page_config(
    page_title="Exam Results Dashboard",
    page_icon="📊",
    layout="wide",
    initial_sidebar_state="expanded"
)

# Custom CSS
st.markdown("""
<style>
    .placeholder {
        color: #6c757d;
        padding: 20px;
        text-align: center;
    }
</style>
""", unsafe_allow_html=True)


# ==================== SESSION STATE ====================

def get_session() -> ResultsSession:
    """The dashboard's ResultsSession, created once per browser session."""
    if "results" not in st.session_state:
        st.session_state.results = ResultsSession()
        st.session_state.loaded_source = None
    return st.session_state.results


def sync_source(session: ResultsSession, year: str, upload) -> None:
    """Reload the session only when the selected year or upload changes."""
    source = ("upload", upload.name, upload.size) if upload is not None else ("year", year)
    if st.session_state.loaded_source == source:
        return

    if upload is not None:
        session.load_bytes(upload.getvalue(), upload.name)
    else:
        session.load_year(year)
    st.session_state.loaded_source = source


# ==================== CHART FUNCTIONS ====================

def create_series_chart(labels: list, values: list, metric: str, title: str,
                        series_name: str) -> go.Figure:
    """Bar chart of one metric, y axis fixed to 0-100%."""
    fig = go.Figure(go.Bar(
        x=labels,
        y=values,
        name=series_name,
        marker_color=METRIC_COLORS.get(metric, "#666"),
        text=[f"{v:.1f}%" for v in values],
        textposition='outside'
    ))

    fig.update_layout(
        title=title,
        yaxis_title="Percentage (%)",
        yaxis=dict(range=PERCENT_AXIS_RANGE),
        height=420,
        showlegend=False
    )

    return fig


def create_class_chart(session: ResultsSession, subject: str, metric: str) -> go.Figure:
    labels, values = session.class_series(subject, metric)
    return create_series_chart(
        labels, values, metric,
        title=f"{subject}: {METRICS[metric]} by Class",
        series_name=METRICS[metric]
    )


def create_subject_chart(session: ResultsSession, metric: str) -> go.Figure:
    labels, values = session.subject_series(metric)
    return create_series_chart(
        labels, values, metric,
        title=f"Overall {METRICS[metric]} by Subject",
        series_name=f"Overall {METRICS[metric]}"
    )


def show_placeholder(message: str) -> None:
    st.markdown(f"<div class='placeholder'>{message}</div>", unsafe_allow_html=True)


# ==================== MAIN DASHBOARD ====================

def main():
    session = get_session()

    st.title("Exam Results Dashboard")

    # Sidebar controls
    st.sidebar.title("Dataset")
    years = list(YEAR_FILES)
    year = st.sidebar.selectbox(
        "Year Group",
        years,
        index=years.index(DEFAULT_YEAR),
        format_func=lambda y: f"Year {y}"
    )
    upload = st.sidebar.file_uploader("Or upload a results workbook", type=["xlsx"])

    sync_source(session, year, upload)

    if session.status == STATUS_LOAD_ERROR:
        st.error(session.message)
        return
    if session.status == STATUS_NO_RECORDS:
        show_placeholder(session.message)
        return

    st.sidebar.markdown("---")
    st.sidebar.caption(
        "Overall % is weighted by each subject's candidate total."
        if session.policy == "weighted"
        else "Overall % is the plain mean across subjects."
    )

    # ==================== KPIs ====================
    cols = st.columns(4)
    for col, kpi in zip(cols, session.kpis()):
        with col:
            st.metric(kpi.label, kpi.display)

    st.divider()

    # ==================== CHARTS ====================
    col1, col2 = st.columns(2)
    with col1:
        metric = st.selectbox(
            "Metric",
            list(METRICS),
            index=list(METRICS).index(DEFAULT_METRIC),
            format_func=lambda m: METRICS[m]
        )
    with col2:
        subject = st.selectbox("Subject", session.subjects)

    col1, col2 = st.columns(2)
    with col1:
        st.plotly_chart(create_class_chart(session, subject, metric), use_container_width=True)
    with col2:
        st.plotly_chart(create_subject_chart(session, metric), use_container_width=True)

    st.subheader("Records")
    st.dataframe(records_to_dataframe(session.records), use_container_width=True, hide_index=True)


if __name__ == "__main__":
    main()
