"""Streamlit UI components."""
from .charts import create_level_gauge, create_trend_chart, create_distribution_chart
from .panels import leave_analysis_tab, render_analysis_tab, render_dashboard_tab, render_settings_tab
