"""
Cubo Estratégia Backend Package

FastAPI-based backend for ROI calculation and strategic portfolio building.
Provides REST API endpoints for access-code sessions, ROI projects,
strategy portfolios, report export, and the text-generation proxy.
"""
