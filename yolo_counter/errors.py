class ShapeError(ValueError):
    """Raw output tensor does not have the expected [1, 5, N] / [1, N, 5] shape."""


class ConfigError(ValueError):
    """Invalid detector configuration."""
