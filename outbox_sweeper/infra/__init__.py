"""Infrastructure adapters: database, AWS, messaging, logging, metrics."""
