"""
Repository modules for database access.
"""
