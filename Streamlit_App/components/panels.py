"""
Tab Panels

Renders the three dashboard tabs from a DashboardState. Panels never
mutate state directly: every user interaction goes through `dispatch`.
"""

import logging
import time
from typing import Callable, List, Optional, Tuple

import streamlit as st

from Field_Reference.level_thresholds import LEVEL_THRESHOLDS, get_level_status, get_prediction_status
from Water_Analysis.core.chart_formatter import format_series
from Water_Analysis.core.dashboard_state import (
    DashboardState, ErrorDismissed, GranularitySelected, RefreshRequested,
    SeriesSelected, SettingsChanged
)
from Water_Analysis.core.distribution import bin_heights
from Water_Analysis.core.exporter import (
    CSV_MIME, export_filename, recording_filename, to_csv_bytes
)
from Water_Analysis.core.recorder import ReadingRecorder
from Water_Analysis.core.samples import Granularity, Sample, SeriesType
from Water_Analysis.sources.base import INDEX_HINT
from .charts import create_distribution_chart, create_level_gauge, create_trend_chart, prediction_color

logger = logging.getLogger(__name__)

Dispatch = Callable[[object], None]


def _metric_card(value: str, caption: str, status: Optional[str] = None, note: str = ""):
    css = f"status-{status}" if status else ""
    note_html = f'<div class="metric-note">{note}</div>' if note else ""
    st.markdown(f'<div class="metric-card"><div class="metric-value {css}">{value}</div>'
                f'<small>{caption}</small>{note_html}</div>', unsafe_allow_html=True)


def _csv_payload(window) -> Optional[bytes]:
    try:
        return to_csv_bytes(window)
    except (ValueError, OSError, OverflowError) as e:
        logger.error("Error exporting CSV: %s", e)
        return None


# -----------------------------------------------------------------------------
# Dashboard
# -----------------------------------------------------------------------------

def render_dashboard_tab(state: DashboardState):
    height = state.current_height
    status, percent, message = get_level_status(height)
    gauge = LEVEL_THRESHOLDS['gauge']

    col_gauge, col_status = st.columns([1.2, 1])
    with col_gauge:
        st.markdown("### 💧 Ketinggian Air")
        st.plotly_chart(create_level_gauge(height, status), use_container_width=True)
        st.caption(f"{percent:.0f}% dari kapasitas sensor")

    with col_status:
        st.markdown("### Status Peringatan")
        if status == "danger":
            st.error(message)
        elif status == "warning":
            st.warning(message)
        else:
            st.success(message)
        st.markdown(f"- Ambang batas aman: < {gauge.WARNING_PERCENT:.0f}%\n"
                    f"- Ambang batas waspada: {gauge.WARNING_PERCENT:.0f}% - {gauge.DANGER_PERCENT:.0f}%\n"
                    f"- Ambang batas bahaya: > {gauge.DANGER_PERCENT:.0f}%")
        rate = state.current_rate
        _metric_card(f"{rate:.4f} m/s", "Laju Perubahan")

    st.markdown("### 📈 Riwayat Ketinggian Air")
    if state.granularity is not Granularity.DAILY:
        st.caption(f"Rentang {state.granularity.label.lower()} (ubah di tab Analisis)")
    if state.loading or not state.window:
        st.info("📊 Memuat data...")
    else:
        series = format_series(state.window, state.granularity, SeriesType.HEIGHT,
                               state.statistics.predictions)
        st.plotly_chart(create_trend_chart(series, height=280), use_container_width=True)

    stats = state.statistics
    diff = stats.average - height
    arrow = "↓" if stats.average > height else "↑"
    _metric_card(f"{stats.average:.2f} m", "Rata-rata", note=f"{arrow} {abs(diff):.2f}m dari sekarang")


# -----------------------------------------------------------------------------
# Analysis
# -----------------------------------------------------------------------------

def _render_error(state: DashboardState, dispatch: Dispatch):
    if not state.error:
        return
    col_msg, col_btn = st.columns([6, 1])
    with col_msg:
        st.error(state.error)
        if state.result is not None and state.result.missing_index:
            st.caption(INDEX_HINT)
    with col_btn:
        st.button("Tutup", key="dismiss_error", on_click=dispatch, args=(ErrorDismissed(),))


def leave_analysis_tab(recorder: ReadingRecorder) -> Optional[Tuple[Optional[int], List[Sample]]]:
    """Stop a running recording when its tab goes away; returns (started_at, samples) to keep."""
    if not recorder.is_running:
        return None
    samples = recorder.stop()
    logger.info("Recording stopped on tab change")
    return recorder.started_at, samples


def _render_recorder(recorder: ReadingRecorder):
    st.markdown("#### ⏺️ Rekam Data Langsung")
    col_btn, col_info = st.columns([1, 3])
    with col_btn:
        if recorder.is_running:
            if st.button("⏹️ Stop", use_container_width=True):
                samples = recorder.stop()
                st.session_state.recording = (recorder.started_at, samples)
                st.rerun()
        elif st.button("⏺️ Mulai Rekam", use_container_width=True):
            st.session_state.recording = None
            recorder.start()
            st.rerun()
    with col_info:
        if recorder.is_running:
            st.caption(f"Merekam setiap {recorder.interval_s:.0f} detik - "
                       f"{len(recorder.samples)} sampel")

    recording = st.session_state.get('recording')
    if recording and not recorder.is_running:
        started_at, samples = recording
        payload = _csv_payload(samples)
        if payload is None:
            st.error("Gagal mengekspor data.")
        elif samples:
            st.download_button("📥 Unduh Rekaman", payload,
                               file_name=recording_filename(started_at or int(time.time() * 1000)),
                               mime=CSV_MIME)
        else:
            st.caption("Tidak ada sampel yang terekam.")


def render_analysis_tab(state: DashboardState, dispatch: Dispatch, recorder: ReadingRecorder):
    _render_error(state, dispatch)
    stats = state.statistics

    col_title, col_refresh, col_export = st.columns([4, 1, 1])
    with col_title:
        st.markdown("### Statistik Ketinggian Air\n*Analisis data tingkat lanjut*")
    with col_refresh:
        st.button("🔄 Refresh", key="refresh", use_container_width=True,
                  on_click=dispatch, args=(RefreshRequested(),))
    with col_export:
        payload = _csv_payload(state.window) if state.window else None
        if state.window and payload is None:
            st.error("Gagal mengekspor data.")
        st.download_button("📥 Export Data", payload or b"", file_name=export_filename(),
                           mime=CSV_MIME, disabled=not payload, use_container_width=True)

    if state.loading:
        st.info("📊 Memuat data...")
        return

    if state.result is not None and state.result.synthetic:
        st.caption("Data riwayat tidak tersedia - menampilkan data sampel")

    height = state.current_height
    c1, c2, c3, c4, c5 = st.columns(5)
    with c1:
        arrow = "↓" if stats.average > height else "↑"
        _metric_card(f"{stats.average} m", "Rata-rata",
                     note=f"{arrow} {abs(stats.average - height):.2f}m dari sekarang")
    with c2:
        _metric_card(f"{stats.max} m", "Maksimum", note="Tertinggi dalam periode")
    with c3:
        _metric_card(f"{stats.min} m", "Minimum", note="Terendah dalam periode")
    with c4:
        _metric_card(f"{stats.rate_of_change} m/s", "Laju Perubahan", note="Rata-rata perubahan")
    with c5:
        _metric_card(f"{stats.standard_deviation} m", "Standar Deviasi", note="Variasi ketinggian")

    if stats.alerts:
        st.markdown("#### ⚠️ Peringatan Analisis")
        for alert in stats.alerts:
            if alert.level.value == "danger":
                st.error(alert.message)
            else:
                st.warning(alert.message)

    st.markdown("#### 📈 Grafik Analisis")
    col_range, col_series = st.columns(2)
    granularities = list(Granularity)
    with col_range:
        choice = st.radio("Rentang", granularities, horizontal=True,
                          index=granularities.index(state.granularity),
                          format_func=lambda g: g.label, key="granularity_radio")
        if choice is not state.granularity:
            dispatch(GranularitySelected(choice))
            st.rerun()
    series_types = list(SeriesType)
    with col_series:
        series = st.radio("Data", series_types, horizontal=True,
                          index=series_types.index(state.series),
                          format_func=lambda s: s.label, key="series_radio")
        if series is not state.series:
            dispatch(SeriesSelected(series))

    chart_series = format_series(state.window, state.granularity, series,
                                 stats.predictions)
    st.plotly_chart(create_trend_chart(chart_series, is_rate=series is SeriesType.RATE),
                    use_container_width=True)

    st.markdown("#### 📊 Distribusi Ketinggian Air\n*Frekuensi ketinggian dalam rentang periode*")
    st.plotly_chart(create_distribution_chart(bin_heights(state.window)), use_container_width=True)

    st.markdown("#### 🔮 Prediksi Ketinggian Air\n*Berdasarkan data historis dan laju perubahan*")
    p1, p3, p6 = st.columns(3)
    horizons = [(p1, "1 Jam", stats.predictions.one_hour),
                (p3, "3 Jam", stats.predictions.three_hours),
                (p6, "6 Jam", stats.predictions.six_hours)]
    for col, label, value in horizons:
        with col:
            status = get_prediction_status(value)
            arrow = "↑" if value > height else "↓"
            st.markdown(
                f'<div class="metric-card prediction-card">'
                f'<small>{label}</small>'
                f'<div class="metric-value" style="color:{prediction_color(status)}">{value} m</div>'
                f'<div class="metric-note">{arrow} {abs(value - height):.2f}m dari sekarang</div>'
                f'</div>', unsafe_allow_html=True)

    st.divider()
    _render_recorder(recorder)


# -----------------------------------------------------------------------------
# Settings
# -----------------------------------------------------------------------------

def render_settings_tab(state: DashboardState, dispatch: Dispatch):
    """Preference stubs - local to the session, not persisted."""
    defaults = LEVEL_THRESHOLDS['settings']
    settings = state.settings

    def bound(key):
        return lambda: dispatch(SettingsChanged(key, st.session_state[f"setting_{key}"]))

    st.markdown("### Pengaturan Sistem\n*Konfigurasi parameter sistem pemantauan*")
    general, notifications, thresholds, profile = st.tabs(
        ["Umum", "Notifikasi", "Ambang Batas", "Profil"])

    with general:
        st.radio("Tema Sistem", defaults.THEME_OPTIONS, horizontal=True,
                 index=defaults.THEME_OPTIONS.index(settings.get('theme')),
                 key="setting_theme", on_change=bound('theme'))
        st.selectbox("Interval Penyegaran Data", defaults.REFRESH_OPTIONS,
                     index=defaults.REFRESH_OPTIONS.index(settings.get('refresh_interval')),
                     format_func=lambda s: f"Setiap {s} detik" if s != "60" else "Setiap 1 menit",
                     key="setting_refresh_interval", on_change=bound('refresh_interval'))
        st.text_input("Lokasi Pemantauan", value=settings.get('location'),
                      key="setting_location", on_change=bound('location'))

    with notifications:
        st.toggle("Aktifkan Notifikasi", value=settings.get('notifications_enabled'),
                  key="setting_notifications_enabled", on_change=bound('notifications_enabled'))
        st.toggle("Email Notifikasi", value=settings.get('email_notifications'),
                  key="setting_email_notifications", on_change=bound('email_notifications'))
        st.toggle("SMS Notifikasi", value=settings.get('sms_notifications'),
                  key="setting_sms_notifications", on_change=bound('sms_notifications'))

    with thresholds:
        st.caption("Sesuaikan ambang batas untuk peringatan level air")
        for key, label in [('threshold_safe', "Ambang Aman (%)"),
                           ('threshold_warning', "Ambang Waspada (%)"),
                           ('threshold_danger', "Ambang Bahaya (%)")]:
            st.slider(label, 0, 100, value=settings.get(key), key=f"setting_{key}",
                      on_change=bound(key))
        safe, danger = settings.get('threshold_safe'), settings.get('threshold_danger')
        st.markdown(f"**Konfigurasi Saat Ini**\n\n- Aman: 0% - {safe}%\n"
                    f"- Waspada: {safe}% - {danger}%\n- Bahaya: {danger}%")

    with profile:
        for key, label in [('profile_name', "Nama"), ('profile_email', "Email"),
                           ('profile_phone', "No. Telepon")]:
            st.text_input(label, value=settings.get(key), key=f"setting_{key}",
                          on_change=bound(key))
