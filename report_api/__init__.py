"""
Backend for the compliance report designer and viewer.

Exposes the compliance database as JSON datasets, persists report
definitions on disk, and serves the designer/viewer front end.
"""

__version__ = "1.0.0"
