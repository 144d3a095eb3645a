"""
Core utilities shared by the auth and users modules.
"""
