"""ASGI entrypoint for the Know Your Bite API."""

from know_your_bite.api.app import create_app
from know_your_bite.containers import build_container

app = create_app(build_container())
