"""
VIVID laser range camera capture tool.
"""

from .config import APP_VERSION as __version__
