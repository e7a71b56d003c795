"""Version ordering, coordinates and the resolution error taxonomy."""
