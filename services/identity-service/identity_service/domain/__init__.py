"""Account records, errors and the registration/login flows."""
