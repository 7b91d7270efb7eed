"""User, profile and session management backend."""
