"""HTTP API for the mobile dashboard."""
