"""ASGI entrypoint for the life tracker API."""

from life_tracker.api.app import create_app
from life_tracker.containers import build_container

app = create_app(build_container())
