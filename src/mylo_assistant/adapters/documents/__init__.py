"""Document store adapters."""
