"""Core infrastructure: logging, errors, database and password hashing."""
