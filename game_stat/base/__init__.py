"""
Base package for game_stat.

Holds the configuration layer.
"""
