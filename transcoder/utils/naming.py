"""
File naming rules for uploads and transcoded outputs.
"""
import re

from transcoder.constants import OutputNaming

_EXTENSION_RE = re.compile(r"\.[^.]+$")
_UNSAFE_CHARS_RE = re.compile(r"[^a-zA-Z0-9._-]")


def transcoded_name(original_name: str) -> str:
    """
    Derive the display name of a transcoded output.

    Drops the last extension and appends "_transcoded.mp4":
    "clip.mov" -> "clip_transcoded.mp4", "noext" -> "noext_transcoded.mp4".
    """
    stem = _EXTENSION_RE.sub("", original_name)
    return f"{stem}{OutputNaming.SUFFIX}{OutputNaming.EXTENSION}"


def safe_filename(name: str | None) -> str:
    """Replace anything outside [a-zA-Z0-9._-] with an underscore."""
    return _UNSAFE_CHARS_RE.sub("_", name or OutputNaming.FALLBACK_UPLOAD_NAME)
