"""Persistence: SQLAlchemy models, sessions and stores."""
