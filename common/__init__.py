"""
Shared helpers: command execution, logging setup and file system utilities.
"""
