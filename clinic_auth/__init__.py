"""
Clinic Auth - session credentials and role-based access control
for the Medical Clinic API.
"""
