"""Node handlers that talk to the chain, the wallet or market services.

Each module exposes a `HANDLERS` mapping from node type to handler.
"""
