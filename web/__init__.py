"""Catalog browser web app."""
