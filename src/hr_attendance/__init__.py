"""HR attendance shift-time engine.

This package is organized by feature modules (shifts, leaves, attendance,
reports, ...) with a thin Flask controller layer over service/repository layers.
"""

__version__ = "0.1.0"
