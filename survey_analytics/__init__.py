"""Survey analytics service: CSV uploads, plot data and saved analyses."""

__version__ = "1.0.0"
