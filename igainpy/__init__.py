"""Dual-token bonding curve market with a time-decaying fee"""
import logging

# Setup barebones logging without a handler for users to adapt to their needs.
logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"
