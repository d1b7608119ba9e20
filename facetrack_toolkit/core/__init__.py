"""GUI-agnostic core: models, settings persistence, module folders and the
configuration repository."""
