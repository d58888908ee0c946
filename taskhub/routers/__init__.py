"""API routers for Task Hub."""
