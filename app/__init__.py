"""
Streamlit dashboard for the round simulator.
"""
