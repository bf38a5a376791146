"""Screenshot Agent.

Hands an agent the most relevant recent screenshot:
- Image currently on the clipboard
- Latest screenshot-like file on the Desktop (trashed after copying)
- Or the latest image in Downloads (moved out)
"""

__version__ = "1.0.0"
__author__ = "Nick"
