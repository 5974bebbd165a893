"""Read, edit and write Nintendo DS banner files: icons, titles, versions and DSi animations."""

__version__ = "0.1.0"

__all__ = ["__version__"]