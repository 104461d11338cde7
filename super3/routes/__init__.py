"""HTTP blueprints. No business logic here."""
