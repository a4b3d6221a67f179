"""
Profile Sync -- your profile, carried by two gists.

Public files travel in one gist, private-modules in another.
Push reconciles deletions, pull backs up before it overwrites.
"""

from .engine import ProfileSync
from .gist import GistClient

__all__ = ["ProfileSync", "GistClient"]
