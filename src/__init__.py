"""Top-level package marker for the `src` package.

All subpackages are imported as `src.<package>`, both in the installed
distribution and when running the test suite from a checkout.
"""

__all__ = []
