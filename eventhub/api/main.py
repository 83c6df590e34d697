"""ASGI entry point: ``uvicorn eventhub.api.main:app``."""

from .app import create_application

# Create the application instance
app = create_application()
