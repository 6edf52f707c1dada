"""Password hashing and login token helpers."""
