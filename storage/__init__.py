"""SQLite persistence for templates, sessions, and answers."""
