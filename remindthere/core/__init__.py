"""
Core domain for RemindMeThere: models, tracking state and the
geofence evaluation engine. No I/O happens here apart from the
notification sink call made through its port.
"""
