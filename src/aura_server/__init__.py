"""
AURA Server

Knowledge retrieval and context assembly service for a university
residence-hall assistant.
"""

__version__ = "1.0.0"
