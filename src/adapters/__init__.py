"""Host-side adapters that implement the core ports."""
