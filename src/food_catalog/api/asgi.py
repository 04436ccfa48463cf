"""ASGI entrypoint for the food catalog API."""

from food_catalog.api.app import create_app
from food_catalog.containers import build_container

app = create_app(build_container())
