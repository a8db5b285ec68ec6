"""
Command-line interface for ESM Map Tasks.
"""
