"""
Core infrastructure: configuration, logging, security, and the JSON
record store with its file lock.
"""
