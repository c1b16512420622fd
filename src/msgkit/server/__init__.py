"""HTTP render endpoint for xprint."""

from msgkit.server.app import create_app, parse_address, serve

__all__ = ["create_app", "parse_address", "serve"]
