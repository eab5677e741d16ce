"""
Mangrove Watch - REST API
"""
