"""
APIBank Administrative Service

Account provisioning, identity management and balance administration for a
retail bank, with Decimal money handling and pluggable storage.
"""

__version__ = "1.0.0"
