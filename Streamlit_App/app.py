"""
Water Level Monitor
Main Streamlit Dashboard Application

Run with: streamlit run Streamlit_App/app.py

Environment:
    FIREBASE_DATABASE_URL        Realtime Database URL (offline sample data if unset)
    FIREBASE_CREDENTIALS         Service-account JSON path (default credentials if unset)
    WATER_LEVEL_REFRESH_SECONDS  Page refresh interval for live readings (default 30)
"""

import atexit
import logging
import sys
from pathlib import Path

import streamlit as st
from streamlit_autorefresh import st_autorefresh

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from Water_Analysis.core.dashboard_state import (
    DashboardState, LiveReadingReceived, Tab, TabSelected, WindowLoaded, reduce
)
from Water_Analysis.core.recorder import ReadingRecorder
from Water_Analysis.core.window_loader import WindowLoader
from Water_Analysis.sources.base import FetchError
from Water_Analysis.sources.firebase_source import FirebaseSettings, FirebaseSource
from Water_Analysis.sources.live_buffer import LiveReadingBuffer
from Water_Analysis.sources.memory_source import InMemorySource
from Streamlit_App.components.panels import leave_analysis_tab, render_analysis_tab, render_dashboard_tab, render_settings_tab

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger("water_level_monitor")

TAB_LABELS = {Tab.DASHBOARD: "Dashboard", Tab.ANALISIS: "Analisis", Tab.PENGATURAN: "Pengaturan"}

# Page config
st.set_page_config(
    page_title="Water Level Monitor",
    page_icon="💧",
    layout="wide",
    initial_sidebar_state="collapsed"
)

# Custom CSS - clean, minimal UI
st.markdown("""
<style>
    @import url('https://fonts.googleapis.com/css2?family=DM+Sans:wght@400;500;600;700&display=swap');

    .stApp { background: #f8fafc; }
    h1, h2, h3, h4 { font-family: 'DM Sans', sans-serif !important; color: #0f172a !important; }

    .metric-card {
        background: #fff;
        border: 1px solid #e2e8f0;
        border-radius: 12px;
        padding: 16px;
        margin: 8px 0;
        box-shadow: 0 1px 3px rgba(0,0,0,0.05);
    }
    .prediction-card { border-style: dashed; text-align: center; }

    .metric-value { font-family: 'DM Sans', sans-serif; font-size: 1.6rem; font-weight: 600; color: #064e3b; }
    .metric-note { color: #059669; font-size: 0.75rem; margin-top: 6px; }
    .status-safe { color: #059669 !important; }
    .status-warning { color: #d97706 !important; }
    .status-danger { color: #dc2626 !important; }

    .source-badge {
        color: #64748b;
        font-size: 0.85rem;
        font-weight: 500;
    }
</style>
""", unsafe_allow_html=True)


@st.cache_resource
def get_source():
    """One store client per process; offline in-memory store when Firebase is not configured."""
    settings = FirebaseSettings.from_env()
    if settings is None:
        logger.warning("FIREBASE_DATABASE_URL not set - running on sample data")
        return InMemorySource(), None
    try:
        return FirebaseSource(settings), settings
    except FetchError as e:
        logger.error("Firebase client unavailable, running on sample data: %s", e)
        return InMemorySource(), None


@st.cache_resource
def get_live_buffer(_source) -> LiveReadingBuffer:
    buffer = LiveReadingBuffer(_source)
    buffer.start()
    atexit.register(buffer.stop)
    return buffer


def dispatch(action):
    st.session_state.dashboard = reduce(st.session_state.dashboard, action)


def init_session(source, buffer: LiveReadingBuffer):
    if 'dashboard' not in st.session_state:
        st.session_state.dashboard = DashboardState()
        st.session_state.live_version = -1
    if 'loader' not in st.session_state:
        st.session_state.loader = WindowLoader(source)
    if 'recorder' not in st.session_state:
        st.session_state.recorder = ReadingRecorder(buffer.latest)


def sync_live_reading(buffer: LiveReadingBuffer):
    version, reading = buffer.snapshot()
    if version != st.session_state.live_version:
        st.session_state.live_version = version
        dispatch(LiveReadingReceived(reading))


def load_window_if_needed():
    state = st.session_state.dashboard
    if not state.loading:
        return
    generation = state.generation
    with st.spinner("Memuat data riwayat..."):
        result = st.session_state.loader.load(state.granularity, state.live.height, state.live.rate)
    dispatch(WindowLoaded(generation, result))


def main():
    source, settings = get_source()
    buffer = get_live_buffer(source)
    init_session(source, buffer)

    refresh_seconds = settings.refresh_seconds if settings else 30
    st_autorefresh(interval=refresh_seconds * 1000, key="live_refresh")

    sync_live_reading(buffer)
    load_window_if_needed()
    state = st.session_state.dashboard

    # Header
    col1, col2 = st.columns([3, 1])
    with col1:
        st.markdown("# 💧 Water Level Monitor\n*Sistem Pemantauan Ketinggian Air*")
    with col2:
        badge = "🟢 Firebase realtime" if settings else "🟡 Mode offline (data sampel)"
        st.markdown(f'<div style="text-align:right;padding-top:24px;"><span class="source-badge">{badge}</span></div>',
                    unsafe_allow_html=True)

    if settings is None:
        st.warning("Set `FIREBASE_DATABASE_URL` (and valid credentials) to connect to the live database.")
    elif not buffer.active:
        st.warning("Koneksi data langsung gagal - menampilkan nilai bawaan.")

    tabs = list(Tab)
    selected = st.radio("Menu", tabs, index=tabs.index(state.active_tab), horizontal=True,
                        format_func=TAB_LABELS.get, label_visibility="collapsed", key="tab_radio")
    if selected is not state.active_tab:
        if state.active_tab is Tab.ANALISIS:
            recording = leave_analysis_tab(st.session_state.recorder)
            if recording is not None:
                st.session_state.recording = recording
        dispatch(TabSelected(selected))
        state = st.session_state.dashboard

    if state.active_tab is Tab.DASHBOARD:
        render_dashboard_tab(state)
    elif state.active_tab is Tab.ANALISIS:
        render_analysis_tab(state, dispatch, st.session_state.recorder)
    else:
        render_settings_tab(state, dispatch)

    st.markdown("---")
    location = state.settings.get('location')
    st.markdown(f'<div style="text-align:center;color:#94a3b8;font-size:0.8rem;">© Sistem Pemantauan Ketinggian Air • {location}</div>',
                unsafe_allow_html=True)


if __name__ == "__main__":
    main()
