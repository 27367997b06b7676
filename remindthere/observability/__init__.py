"""
Observability for RemindMeThere: logging, metrics and HTTP endpoints.
"""
