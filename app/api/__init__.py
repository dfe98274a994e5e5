"""HTTP and realtime API layer."""
