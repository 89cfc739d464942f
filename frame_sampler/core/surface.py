"""Seekable video surfaces and the pixel canvas frames are drawn into."""

import asyncio
import base64
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, List, Optional, Protocol, Union, runtime_checkable

import cv2
import numpy as np

from frame_sampler.config.config import IMAGE_EXTENSION, IMAGE_MIME_TYPE
from frame_sampler.exceptions import CaptureFailed, EncodeFailed, VideoFileError
from frame_sampler.logging.logger import get_logger
from frame_sampler.models import VideoInfo

SettleListener = Callable[[float], None]


@runtime_checkable
class MediaSource(Protocol):
    """Addressable video resource with a single decode position.

    Assigning ``position`` is a reposition request. Once the frame for that
    request is decoded, every registered settle listener is called with the
    requested position. ``read_frame`` returns the decoded pixels (BGR) or
    ``None`` when the frame could not be read.
    """

    position: float

    @property
    def duration(self) -> float: ...

    @property
    def natural_width(self) -> int: ...

    @property
    def natural_height(self) -> int: ...

    @property
    def paused(self) -> bool: ...

    def add_settle_listener(self, listener: SettleListener) -> None: ...

    def remove_settle_listener(self, listener: SettleListener) -> None: ...

    def read_frame(self) -> Optional[np.ndarray]: ...


class VideoCaptureSurface:
    """MediaSource over a local video file, decoded with OpenCV."""

    def __init__(self, video_path: Union[str, Path]):
        self.video_path = Path(video_path)
        if not self.video_path.exists():
            raise VideoFileError(f"Video file '{self.video_path}' does not exist")

        self._capture = cv2.VideoCapture(str(self.video_path))
        if not self._capture.isOpened():
            raise VideoFileError(f"Failed to open video '{self.video_path}'")

        self.fps = self._capture.get(cv2.CAP_PROP_FPS) or 0.0
        self.frame_count = int(self._capture.get(cv2.CAP_PROP_FRAME_COUNT))
        self._width = int(self._capture.get(cv2.CAP_PROP_FRAME_WIDTH))
        self._height = int(self._capture.get(cv2.CAP_PROP_FRAME_HEIGHT))
        self._duration = self.frame_count / self.fps if self.fps > 0 else 0.0

        self._position = 0.0
        self._paused = True
        self._frame: Optional[np.ndarray] = None
        self._listeners: List[SettleListener] = []
        # one worker keeps decodes in request order
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="surface-decode")
        self.logger = get_logger()

    @property
    def info(self) -> VideoInfo:
        return VideoInfo(
            path=self.video_path,
            duration=self._duration,
            fps=self.fps,
            total_frames=self.frame_count,
            width=self._width,
            height=self._height,
        )

    @property
    def duration(self) -> float:
        return self._duration

    @property
    def natural_width(self) -> int:
        return self._width

    @property
    def natural_height(self) -> int:
        return self._height

    @property
    def paused(self) -> bool:
        return self._paused

    def play(self) -> None:
        self._paused = False

    def pause(self) -> None:
        self._paused = True

    @property
    def position(self) -> float:
        return self._position

    @position.setter
    def position(self, seconds: float) -> None:
        self.seek(seconds)

    def seek(self, seconds: float) -> None:
        """Request a reposition; settle listeners fire once the frame is decoded."""
        self._position = seconds
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        if loop is None:
            self._frame = self._decode(seconds)
            self._notify(seconds)
            return

        pending = loop.run_in_executor(self._executor, self._decode, seconds)
        pending.add_done_callback(lambda fut: self._on_decoded(fut, seconds))

    def _decode(self, seconds: float) -> Optional[np.ndarray]:
        self._capture.set(cv2.CAP_PROP_POS_MSEC, seconds * 1000.0)
        ok, frame = self._capture.read()
        if not ok or frame is None:
            return None
        return frame

    def _on_decoded(self, fut: "asyncio.Future", seconds: float) -> None:
        if fut.cancelled():
            return
        error = fut.exception()
        if error is not None:
            self.logger.warning(f"Decode at {seconds:.3f}s failed: {error}")
            self._frame = None
        else:
            self._frame = fut.result()
        self._notify(seconds)

    def _notify(self, seconds: float) -> None:
        for listener in list(self._listeners):
            listener(seconds)

    def add_settle_listener(self, listener: SettleListener) -> None:
        self._listeners.append(listener)

    def remove_settle_listener(self, listener: SettleListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def read_frame(self) -> Optional[np.ndarray]:
        return self._frame

    def close(self) -> None:
        self._executor.shutdown(wait=True)
        self._capture.release()

    async def aclose(self) -> None:
        """Close without blocking the event loop on a decode still in progress."""
        await asyncio.get_running_loop().run_in_executor(None, self.close)

    def __enter__(self) -> "VideoCaptureSurface":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    async def __aenter__(self) -> "VideoCaptureSurface":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()


class FrameCanvas:
    """Fixed-size pixel buffer that frames are drawn into and encoded from."""

    def __init__(self, width: int, height: int):
        if width <= 0 or height <= 0:
            raise CaptureFailed(f"Invalid canvas size {width}x{height}")
        self.width = width
        self.height = height
        self.buffer = np.zeros((height, width, 3), dtype=np.uint8)

    def draw(self, frame: Optional[np.ndarray]) -> None:
        """Copy a decoded frame into the buffer, resizing to the canvas size."""
        if frame is None or frame.size == 0:
            raise CaptureFailed("No decoded frame to draw")
        try:
            if frame.ndim == 2:
                frame = cv2.cvtColor(frame, cv2.COLOR_GRAY2BGR)
            if frame.shape[:2] != (self.height, self.width):
                frame = cv2.resize(frame, (self.width, self.height))
            self.buffer[:, :] = frame[:, :, :3]
        except (cv2.error, ValueError) as exc:
            raise CaptureFailed(f"Failed to draw frame: {exc}") from exc

    def encode(self, quality: float) -> bytes:
        """Encode the buffer as JPEG; quality is on a 0-1 scale."""
        params = [int(cv2.IMWRITE_JPEG_QUALITY), int(round(quality * 100))]
        try:
            ok, data = cv2.imencode(f".{IMAGE_EXTENSION}", self.buffer, params)
        except cv2.error as exc:
            raise EncodeFailed(f"Failed to encode frame: {exc}") from exc
        if not ok:
            raise EncodeFailed("Failed to encode frame")
        return data.tobytes()

    def data_url(self, quality: float) -> str:
        encoded = base64.b64encode(self.encode(quality)).decode("ascii")
        return f"data:{IMAGE_MIME_TYPE};base64,{encoded}"
