"""Email/password identity service: signup, login and bearer token issuance."""
