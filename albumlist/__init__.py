"""
Album List Playlist Builder

Core modules for turning an `Artist - Album` list into a Spotify playlist.
"""

__version__ = "1.0.0"
__author__ = "albumlist-to-spotify Contributors"

from .config_manager import Config

__all__ = ['Config']
