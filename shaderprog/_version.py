"""
Versioning for shaderprog.
"""

# The reference version number, to be bumped before each release.
# setup.py reads this definition when building a distribution.
__version__ = "0.1.0"

version_info = tuple(int(i) for i in __version__.split("."))
