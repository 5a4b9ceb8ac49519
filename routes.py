from fastapi import FastAPI
from controller.plagiarism_controller import plagiarism_router


def register_routes(app: FastAPI) -> None:
    """Register & Access control controllers here."""
    app.include_router(plagiarism_router)
