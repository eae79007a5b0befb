"""
gitdata - path navigation and commit creation over the GitHub git data API.

Mirrors trees, blobs, commits and references of a remote repository, resolves
slash-separated paths into content-addressed objects and creates new commits
by chaining tree, commit and reference calls.
"""

__version__ = "1.0.0"
__author__ = "Alessandro Bellucci"
