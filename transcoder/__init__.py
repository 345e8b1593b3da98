"""
Transcoder backend.

Accepts uploaded media, records transcode jobs in a durable JSON document and
runs one supervised ffmpeg process per job in a bounded background pool.
"""

__version__ = "0.1.0"
