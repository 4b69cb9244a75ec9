"""Persistence entities: domain models, tables and repositories."""
