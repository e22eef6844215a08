"""Configuration, logging, database, errors and middleware."""
