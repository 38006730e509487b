"""
HTTP server exposing the map event API
"""
