"""Configuration, extensions, logging and error handling."""
