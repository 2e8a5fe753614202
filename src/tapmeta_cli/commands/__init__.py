"""Command groups for the tapmeta CLI."""
