"""Adapters implementing the core ports for S3, SQLite, and CSV."""
