"""
Shared helpers: text normalization and the run lock.
"""
