# label_lifecycle/services/transcripts.py
"""
Transcript access.

Transcripts are WebVTT files written by the transcription worker at
{owner_id}/{video_id}/transcription.vtt. The classifier only needs the
spoken text, so cue ids, timings and the header are dropped.
"""

import logging
from typing import Optional

from label_lifecycle.errors import LifecycleError
from label_lifecycle.models import Video
from label_lifecycle.storage import AssetStore, transcript_key

logger = logging.getLogger(__name__)


def vtt_to_text(vtt: str) -> str:
    """
    Flatten a WebVTT document into a single line of text.

    Drops the WEBVTT header, numeric cue identifiers, timing lines and blank
    lines, and joins the remaining cue text with spaces.
    """
    parts = []
    for raw_line in vtt.splitlines():
        line = raw_line.strip()
        if not line:
            continue
        if line.startswith("WEBVTT"):
            continue
        if line.isdigit():
            continue
        if "-->" in line:
            continue
        parts.append(line)
    return " ".join(parts)


def fetch_transcript(video: Video, store: AssetStore) -> Optional[str]:
    """
    Load the plain-text transcript of a video.

    Returns:
        Transcript text, or None if it is missing, empty or unreadable
    """
    key = transcript_key(video.owner_id, video.id)
    try:
        vtt = store.get_text(key)
    except (LifecycleError, ValueError) as e:
        logger.warning(
            f"[TRANSCRIPT] Could not read {key}: {e}",
            extra={"video_id": str(video.id)},
        )
        return None

    if vtt is None:
        logger.debug(f"[TRANSCRIPT] No transcript at {key}")
        return None

    text = vtt_to_text(vtt)
    return text or None
