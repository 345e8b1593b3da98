"""
Id generation helper for the application.

Provides consistent id generation for files and jobs.
"""
import uuid


def generate_id() -> str:
    """
    Generate a new record id.

    Returns:
        str: A new UUID4 string, safe to embed in file names
    """
    return str(uuid.uuid4())
