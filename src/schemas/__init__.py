"""JSON schemas and record converters for bellows parameter files."""
