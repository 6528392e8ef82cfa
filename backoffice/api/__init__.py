"""HTTP API for the admin console."""
