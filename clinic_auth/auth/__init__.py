"""
Authentication module for the medical clinic system.

This module provides authentication and authorization functionality including:
- User registration and password login
- Access/refresh token pairs signed with separate secrets
- Refresh token rotation with server-side revocation
- Role-based access control on every protected route
"""
