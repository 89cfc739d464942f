import asyncio
from typing import List, Optional, Set

import cv2
import numpy as np
import pytest


class FakeSurface:
    """Scripted MediaSource that settles asynchronously on the event loop."""

    def __init__(
        self,
        duration: float = 5.0,
        position: float = 0.0,
        paused: bool = True,
        width: int = 32,
        height: int = 24,
        unreadable: Optional[Set[float]] = None,
        stalled: Optional[Set[float]] = None,
    ):
        self.duration = duration
        self.natural_width = width
        self.natural_height = height
        self.paused = paused
        self.unreadable = unreadable or set()
        self.stalled = stalled or set()
        self.seeks: List[float] = []
        self.pending = 0
        self.max_pending = 0
        self.on_seek = None
        self._position = position
        self._listeners: List = []
        self._frame: Optional[np.ndarray] = None

    @property
    def position(self) -> float:
        return self._position

    @position.setter
    def position(self, seconds: float) -> None:
        self._position = seconds
        self.seeks.append(seconds)
        self.pending += 1
        self.max_pending = max(self.max_pending, self.pending)
        if self.on_seek is not None:
            self.on_seek(seconds)
        if seconds in self.stalled:
            return
        self._schedule(seconds)

    def _schedule(self, seconds: float) -> None:
        asyncio.get_running_loop().call_soon(self._settle, seconds)

    def _settle(self, seconds: float) -> None:
        self.pending -= 1
        if seconds in self.unreadable:
            self._frame = None
        else:
            value = int(seconds * 10) % 256
            self._frame = np.full((self.natural_height, self.natural_width, 3), value, dtype=np.uint8)
        for listener in list(self._listeners):
            listener(seconds)

    def add_settle_listener(self, listener) -> None:
        self._listeners.append(listener)

    def remove_settle_listener(self, listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def read_frame(self) -> Optional[np.ndarray]:
        return self._frame


@pytest.fixture
def make_surface():
    return FakeSurface


@pytest.fixture
def sample_video(tmp_path):
    """Three-second 64x48 MJPG clip at 10 fps."""
    path = tmp_path / "clip.avi"
    writer = cv2.VideoWriter(str(path), cv2.VideoWriter_fourcc(*"MJPG"), 10, (64, 48))
    if not writer.isOpened():
        pytest.skip("OpenCV build cannot write MJPG video")
    for i in range(30):
        writer.write(np.full((48, 64, 3), i * 8, dtype=np.uint8))
    writer.release()
    return path
