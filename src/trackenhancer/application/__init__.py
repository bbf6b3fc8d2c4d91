"""Application layer: use-case services orchestrating the provider clients."""
