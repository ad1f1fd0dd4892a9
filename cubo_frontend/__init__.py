"""Cubo Estratégia Streamlit frontend."""
