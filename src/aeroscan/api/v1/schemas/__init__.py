# Request/response schemas for the API routers.
