"""Graph models, node catalog, handlers and dispatch."""
