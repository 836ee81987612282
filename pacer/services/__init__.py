"""Training computations and external service clients."""
