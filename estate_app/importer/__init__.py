"""
Landlord importer feature package.

Mounts the import blueprint and registers the matching CLI group based on the
``IMPORTER_ENABLED`` flag.
"""

from __future__ import annotations

from flask import Flask

from estate_app.utils.importer import is_importer_enabled

from .cli import get_disabled_importer_group, importer_cli
from .views import landlord_import_blueprint

IMPORTER_EXTENSION_KEY = "importer"

__all__ = [
    "init_importer",
    "IMPORTER_EXTENSION_KEY",
]


def _set_cli(app: Flask, enabled: bool) -> None:
    """Register the appropriate CLI group based on flag state."""
    # Avoid duplicate registrations when running tests
    command_name = importer_cli.name
    if command_name in app.cli.commands:
        app.cli.commands.pop(command_name)

    if enabled:
        app.cli.add_command(importer_cli)
    else:
        app.cli.add_command(get_disabled_importer_group())


def init_importer(app: Flask) -> None:
    """
    Mount the importer blueprint and CLI.

    The blueprint is always registered so the flag can be flipped at runtime;
    its import endpoints answer 404 while the importer is disabled.
    """
    enabled = is_importer_enabled(app)
    app.extensions[IMPORTER_EXTENSION_KEY] = {"enabled": enabled}

    if landlord_import_blueprint.name not in app.blueprints:
        app.register_blueprint(landlord_import_blueprint)
    _set_cli(app, enabled=enabled)

    if enabled:
        app.logger.info("Landlord importer enabled.")
    else:
        app.logger.info("Importer disabled via IMPORTER_ENABLED flag; import endpoints will return 404.")
