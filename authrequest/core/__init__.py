"""
Core helpers package for the request layer.

This package contains low-level infrastructure helpers: settings,
header construction, persistent storage, the credential store and the
platform hook protocols. Keeping these helpers in a dedicated package
makes it easy to swap implementations or customise behaviour for
testing.
"""

__all__ = []
