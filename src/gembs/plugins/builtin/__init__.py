"""Plugins bundled with gembs. Each module here is registered under its basename."""
