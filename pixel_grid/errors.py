# pixel_grid/errors.py
"""Exceptions raised at the pixel_grid boundary."""


class InvalidParameter(ValueError):
    """Rejected configuration or input (bad grid size, empty image, ...)."""


__all__ = ["InvalidParameter"]
