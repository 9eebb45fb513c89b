"""
mcspy/core - scan, classify and aggregate pipeline
"""
