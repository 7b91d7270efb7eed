"""Business logic: authentication, sessions, users and profiles."""
