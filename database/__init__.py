"""MongoDB persistence via Beanie."""
