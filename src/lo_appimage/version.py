"""Single source of truth for the lo-appimage version string."""

__version__: str = "0.3.0"
