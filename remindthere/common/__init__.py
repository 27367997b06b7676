"""
Shared helpers for RemindMeThere (geodesy, time conversion, retry).
"""
