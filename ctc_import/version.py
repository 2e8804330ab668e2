"""Version declaration for ctc-puzzle-import.

Keep in sync with pyproject.toml; it is also sent in the User-Agent header.
"""

__all__ = ["__version__"]

__version__ = "1.1.0"
