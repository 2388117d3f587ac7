"""Menu booking engine backend."""
