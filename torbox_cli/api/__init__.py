"""
TorBox API Layer.

This package handles all communication with the TorBox web download API.
"""

from .client import TorboxAPIClient

__all__ = ["TorboxAPIClient"]
