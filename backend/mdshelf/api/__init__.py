"""HTTP API — routers and dependencies."""
