"""
Router aggregator — wires all endpoint modules together.
"""

from fastapi import APIRouter

from buffet.api.endpoints import auth, employees, inventory, logs

api_router = APIRouter()

# Login, registration, logout, profile
api_router.include_router(auth.router)

# Manager-only: employee accounts, items, pots
api_router.include_router(employees.router)
api_router.include_router(inventory.router)

# Production / waste logs and the dashboard
api_router.include_router(logs.router)
