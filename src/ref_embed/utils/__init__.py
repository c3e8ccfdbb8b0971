"""Shared utility helpers."""

from ref_embed.utils.paths import atomic_temp_path, write_json_atomically
from ref_embed.utils.time_utils import now_utc

__all__ = [
    "atomic_temp_path",
    "write_json_atomically",
    "now_utc",
]
