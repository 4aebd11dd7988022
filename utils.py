import os
import streamlit as st


def get_secret(name: str, default: str | None = None) -> str | None:
    """
    Looks up a configuration value.

    Environment variables win (API server, scripts, CI); otherwise the value
    comes from Streamlit secrets (.streamlit/secrets.toml or Streamlit Cloud
    app settings).
    """
    value = os.environ.get(name)
    if value:
        return value
    try:
        return st.secrets.get(name, default)
    except FileNotFoundError:
        # No secrets.toml outside of a configured Streamlit deployment
        return default
