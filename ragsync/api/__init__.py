"""HTTP API: health, search, context and sync endpoints."""
