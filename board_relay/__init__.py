"""
Board Relay.

Socket.IO event relay keeping the players of a board game session in sync.
"""

__version__ = "0.1.0"
