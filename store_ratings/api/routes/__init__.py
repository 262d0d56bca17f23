from fastapi import FastAPI

from . import admin, health, ratings, roles, stores, users


def register_routes(app: FastAPI) -> None:
    """Attach all API routers to the FastAPI application."""
    app.include_router(health.router)
    app.include_router(roles.router)
    app.include_router(stores.router)
    app.include_router(ratings.router)
    app.include_router(users.router)
    app.include_router(admin.router)
