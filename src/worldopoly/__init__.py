"""
Worldopoly: a world-tour Monopoly variant with AI opponents.
"""

__version__ = "0.1.0"
