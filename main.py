"""Main entry point for the FastAPI application."""

import uvicorn

from components.core.logging_config import setup_logging
from restapi.router import create_app

setup_logging()
app = create_app()

if __name__ == "__main__":
    uvicorn.run("main:app", reload=True)
