"""HTTP layer: app factory, routers and middleware."""
