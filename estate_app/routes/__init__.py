# estate_app/routes/__init__.py
"""
Application routes package
"""

from estate_app.importer import init_importer

from .auth import register_auth_routes


def init_routes(app):
    """Initialize all application routes"""
    register_auth_routes(app)
    init_importer(app)
