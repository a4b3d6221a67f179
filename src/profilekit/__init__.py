"""
profilekit — a portable shell profile.

Directory bookmarks that follow you between machines, and a sync
engine that pushes your profile files to gists and pulls them back.
"""

import os

__version__ = "0.1.0"

PROFILE_HOME = os.environ.get("PROFILEKIT_HOME", "~/.config/powershell")
