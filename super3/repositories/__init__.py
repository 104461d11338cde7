"""Persistence per entity. Repositories work inside a caller-provided session."""
