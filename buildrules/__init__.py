"""
Project build rules: commit and push, start or stop the local app, and roll back to the last good branch.
"""

__version__ = "1.0.0"
