# Credential resolution, owner identity, and rate limiting.
