"""
Database package — user profile storage.
"""
