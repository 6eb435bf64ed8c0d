"""ASGI entrypoint for the storefront API."""

from picaso.api.app import create_app
from picaso.containers import build_container

app = create_app(build_container())
