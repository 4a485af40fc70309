"""Upload slot tracking for season media.

A slot distinguishes "nothing new selected" from "the stored image was
explicitly deleted", so the backend knows which stored assets to garbage
collect. Galleries additionally carry the ordered list of stored references
the user kept; the backend computes the deletion set by difference.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class SlotState(str, Enum):
    """State of a single upload slot."""

    UNCHANGED = "unchanged"
    REPLACED = "replaced"
    REMOVED = "removed"


@dataclass(frozen=True)
class UploadedFile:
    """A file selected for upload, held in memory."""

    filename: str
    content: bytes
    content_type: str = "application/octet-stream"

    @property
    def size(self) -> int:
        return len(self.content)

    def as_multipart(self) -> tuple[str, bytes, str]:
        """Return the (filename, content, content_type) tuple httpx expects."""
        return (self.filename, self.content, self.content_type)


@dataclass
class MediaSlot:
    """A single image slot: unchanged, replaced by an upload, or removed.

    The pending upload is set if and only if the state is REPLACED.
    """

    existing: Optional[str] = None
    state: SlotState = SlotState.UNCHANGED
    upload: Optional[UploadedFile] = None

    def replace(self, upload: UploadedFile) -> None:
        """Supersede the stored image (if any) with a new upload."""
        self.upload = upload
        self.state = SlotState.REPLACED

    def remove_existing(self) -> None:
        """Mark the stored image for deletion, dropping any pending upload."""
        self.upload = None
        self.state = SlotState.REMOVED if self.existing else SlotState.UNCHANGED

    def discard_upload(self) -> None:
        """Drop a pending upload and fall back to the stored image."""
        if self.state is SlotState.REPLACED:
            self.upload = None
            self.state = SlotState.UNCHANGED

    @property
    def has_image(self) -> bool:
        """Whether the slot will hold an image after submission."""
        if self.state is SlotState.REPLACED:
            return True
        return self.state is SlotState.UNCHANGED and bool(self.existing)

    @property
    def kept_reference(self) -> Optional[str]:
        """The stored reference that survives submission, if any."""
        if self.state is SlotState.UNCHANGED:
            return self.existing
        return None


@dataclass
class Gallery:
    """An unbounded image gallery with retained references and new uploads."""

    existing: list[str] = field(default_factory=list)
    retained: list[str] = field(default_factory=list)
    uploads: list[UploadedFile] = field(default_factory=list)

    @classmethod
    def from_existing(cls, references: list[str]) -> "Gallery":
        return cls(existing=list(references), retained=list(references))

    def add(self, upload: UploadedFile) -> None:
        self.uploads.append(upload)

    def remove_upload(self, index: int) -> None:
        del self.uploads[index]

    def remove_existing(self, reference: str) -> None:
        """Drop a stored reference from the retained list."""
        self.retained = [ref for ref in self.retained if ref != reference]

    def retained_references(self) -> list[str]:
        return list(self.retained)

    def removed_references(self) -> list[str]:
        return [ref for ref in self.existing if ref not in self.retained]

    @property
    def changed(self) -> bool:
        return bool(self.uploads) or self.retained != self.existing


def plan_gallery_update(
    existing: list[str],
    retained: Optional[list[str]],
) -> tuple[list[str], list[str]]:
    """Compute which stored gallery references survive an update.

    Args:
        existing: References currently stored on the season
        retained: Ordered references the client kept, or None when the client
            did not send a retention list (keep everything)

    Returns:
        Tuple of (kept, to_delete). References in `retained` that are not
        stored on the season are ignored.
    """
    if retained is None:
        return list(existing), []

    stored = set(existing)
    kept: list[str] = []
    for ref in retained:
        if ref in stored and ref not in kept:
            kept.append(ref)
    to_delete = [ref for ref in existing if ref not in kept]
    return kept, to_delete
