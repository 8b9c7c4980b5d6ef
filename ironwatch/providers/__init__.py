"""Concrete adapters for the interfaces in :mod:`ironwatch.interfaces`."""
