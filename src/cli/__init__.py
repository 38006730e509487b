"""
Command-line client for gcs-map-server
"""
