"""Module-level app served by uvicorn as ``sales_tracker.api.asgi:app``."""

from sales_tracker.api.app import create_app
from sales_tracker.config import Settings
from sales_tracker.containers import build_container

settings = Settings()
app = create_app(build_container(settings))
