"""Database helpers for the SQL reminder store."""
