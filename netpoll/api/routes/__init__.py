"""Status API routes."""
