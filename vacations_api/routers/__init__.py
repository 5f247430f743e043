"""
FastAPI routers grouped by domain (users, trips, bookings, admin, etc.).

Each module exposes an APIRouter mounted under /api by app.py.
"""
