"""Shared translation catalogues consumed by the backend and API clients."""
