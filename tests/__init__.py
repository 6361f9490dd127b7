"""docshelf test suite."""
