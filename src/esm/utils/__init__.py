"""
Utility helpers for ESM Map Tasks.
"""
