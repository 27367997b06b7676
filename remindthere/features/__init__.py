"""
User-facing features built on the core and the adapters.
"""
