"""Solid# CLI client: API access, session handling and project sync."""
