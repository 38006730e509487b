"""
GCS Live Map
"""
