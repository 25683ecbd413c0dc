# Package initialization for vaultprune.
# This file intentionally contains only minimal metadata.
# All functional code lives in submodules to keep imports explicit and predictable.

__all__ = [
    "__version__",
]

# Package version.
# Keep in sync with pyproject.toml.
__version__ = "0.1.0"
