"""Clients for the external systems the content store writes to."""
