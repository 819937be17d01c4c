"""Routers for the graph connector (health, metrics, ingest)."""
