"""
torbox-cli: submit links to TorBox web downloads and resolve direct download URLs.
"""

__version__ = "0.1.0"
