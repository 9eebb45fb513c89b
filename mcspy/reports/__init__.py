"""
mcspy/reports - report commands

Each module composes the core pipeline into one command's output.
"""
