"""HTTP blueprints for games, players and maps."""
