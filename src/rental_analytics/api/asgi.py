"""ASGI entrypoint for the rental analytics API."""

from rental_analytics.api.app import create_app
from rental_analytics.containers import build_container

app = create_app(build_container())
