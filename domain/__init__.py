"""Domain entities and rules for vehicle sale applications."""
