# Owner-scoped saved trips.
