"""Domain services: persistence, game coordination, statistics."""
