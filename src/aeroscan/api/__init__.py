# Aeroscan HTTP API layer.
# Created: 2026-10-06
#
# Routers live in api/v1/, OAuth protocol pieces in api/oauth2/.
