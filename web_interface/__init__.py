"""
Web Interface Component

HTTP endpoints for natural-language GeoGebra drawing.
"""

from .app import create_app, main

__all__ = ['create_app', 'main']
