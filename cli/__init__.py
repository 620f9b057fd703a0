"""
Command line chat client
"""
