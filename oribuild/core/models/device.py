"""
Device model — one attached Android device as seen through adb.
"""

from __future__ import annotations

from pydantic import BaseModel

from oribuild.core.models.target import Target


class Device(BaseModel):
    """A device id assigned by adb and the architecture it reports."""

    id: str
    target: Target

    @property
    def target_triple(self) -> str:
        return self.target.triple
