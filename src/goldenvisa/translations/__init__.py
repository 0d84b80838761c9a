"""Shared translation catalogues packaged as JSON resources."""
