"""
Streamlit frontend for Character Studio (Studio view).

Alias entry point: `streamlit run Studio.py` serves the same UI as app.py.
"""

from app import *  # Re-export everything so Streamlit runs the same UI
