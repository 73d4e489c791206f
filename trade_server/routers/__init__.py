"""REST routers for the trade server."""
