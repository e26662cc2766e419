"""Klados worker service for Arke rhiza workflows."""
