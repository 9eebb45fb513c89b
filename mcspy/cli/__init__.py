"""
mcspy/cli - command line interface
"""
