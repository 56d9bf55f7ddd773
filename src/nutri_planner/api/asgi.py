"""ASGI entrypoint for the meal planner API."""

from nutri_planner.api.app import create_app
from nutri_planner.containers import build_container

app = create_app(build_container())
