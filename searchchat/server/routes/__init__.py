"""Route registration for the searchchat API."""

from fastapi import FastAPI

from .agent import router as agent_router


def register_routes(app: FastAPI):
    app.include_router(agent_router)
