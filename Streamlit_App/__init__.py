"""Streamlit dashboard for the water level monitor."""
