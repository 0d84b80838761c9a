"""WSGI entrypoint for deploying the Golden Visa calculator behind Passenger."""

from goldenvisa.backend.app import create_app

# Passenger expects a module-level variable named ``application``.
application = create_app()
