"""Two-slot file attachment store: bounded main + overflow text slots.

Each slot holds a compact JSON array of file records:
    [{"name":"photo.png","data":"data:image/png;base64,...","group":"g-1a2b3c4d"}, ...]

Layout on save:
    main       merged (whole) records first, then leading parts of split files
    overflow   trailing parts that did not fit; absent when nothing spilled

A record too large for main is cut once: prefix in main, suffix in overflow.
Parts share a group id (legacy records without one group by name), and are
re-merged into a single record on any save where the whole file fits.
"""

from slotstore.config import SlotConfig, init_config, load_config
from slotstore.errors import CapacityExceeded, ParseError, SlotStoreError, ValidationError
from slotstore.models import FileRecord
from slotstore.partitioner import Partitioner, SlotLayout
from slotstore.session import AttachmentSession
from slotstore.store import RecordStore

__all__ = [
    "AttachmentSession",
    "CapacityExceeded",
    "FileRecord",
    "ParseError",
    "Partitioner",
    "RecordStore",
    "SlotConfig",
    "SlotLayout",
    "SlotStoreError",
    "ValidationError",
    "init_config",
    "load_config",
]
