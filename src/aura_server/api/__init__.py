"""HTTP routers for the AURA server."""
