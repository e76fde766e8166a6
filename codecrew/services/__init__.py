"""Domain services used by the route blueprints and CLI commands."""
