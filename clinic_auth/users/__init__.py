"""
User directory module: storage access and administrative user management.
"""
