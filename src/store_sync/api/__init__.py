"""
HTTP surface of Store Sync.
"""
