"""
Cubo Estratégia API Routers

Each module in this package defines a FastAPI APIRouter for one area of the
application (sessions, ROI projects, strategy portfolio, export, AI proxy).
Routers are included in the main FastAPI app in main.py.
"""
