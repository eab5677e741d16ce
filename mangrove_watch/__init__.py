"""
Mangrove Watch

Community incident reporting for mangrove ecosystems: geotagged reports,
severity-coded maps, and conservation points.
"""

__version__ = "0.1.0"
