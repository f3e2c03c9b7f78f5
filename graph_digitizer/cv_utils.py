from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple
import numpy as np

def require_cv2():
    try:
        import cv2  # noqa
    except Exception as e:
        raise RuntimeError(
            "OpenCV (cv2) is required for overlay rendering. "
            "Install with:\n"
            "  pip install opencv-python"
        ) from e

@dataclass(frozen=True)
class PixelBuffer:
    """
    Read-only view over a decoded image: (H,W,4) RGBA uint8.

    Decoding belongs to the host (Pillow here); everything downstream only
    reads this array.
    """
    rgba: np.ndarray

    def __post_init__(self):
        if self.rgba.ndim != 3 or self.rgba.shape[2] != 4:
            raise ValueError("rgba must be HxWx4")
        arr = self.rgba if self.rgba.dtype == np.uint8 else self.rgba.astype(np.uint8)
        arr = arr.view()
        arr.flags.writeable = False
        object.__setattr__(self, "rgba", arr)

    @property
    def width(self) -> int:
        return int(self.rgba.shape[1])

    @property
    def height(self) -> int:
        return int(self.rgba.shape[0])

    @property
    def rgb(self) -> np.ndarray:
        return self.rgba[:, :, :3]

    def color_at(self, x: int, y: int) -> Optional[Tuple[int, int, int]]:
        x = int(x)
        y = int(y)
        if not (0 <= x < self.width and 0 <= y < self.height):
            return None
        r, g, b = self.rgba[y, x, :3]
        return int(r), int(g), int(b)

    @classmethod
    def from_pil(cls, pil_img) -> "PixelBuffer":
        return cls(pil_to_rgba(pil_img))

    @classmethod
    def from_rgb(cls, rgb: np.ndarray) -> "PixelBuffer":
        if rgb.ndim != 3 or rgb.shape[2] != 3:
            raise ValueError("rgb must be HxWx3")
        h, w = rgb.shape[:2]
        alpha = np.full((h, w, 1), 255, dtype=np.uint8)
        return cls(np.concatenate([rgb.astype(np.uint8), alpha], axis=2))

def pil_to_rgba(pil_img) -> np.ndarray:
    """
    Convert a PIL image of any mode to an (H,W,4) RGBA uint8 ndarray.
    """
    return np.array(pil_img.convert("RGBA"), dtype=np.uint8)

def load_image(path) -> PixelBuffer:
    from PIL import Image
    with Image.open(path) as img:
        return PixelBuffer.from_pil(img)

def color_distance_mask(rgb: np.ndarray, target_rgb: Tuple[int,int,int], tol: float) -> np.ndarray:
    """
    Return a boolean mask where pixels are within tol of target_rgb using
    Euclidean distance in RGB space:

        sqrt(dR² + dG² + dB²) <= tol

    Compared squared to avoid a sqrt per pixel.
    """
    if rgb.ndim != 3 or rgb.shape[2] < 3:
        raise ValueError("rgb must be HxWx3")

    tol = float(tol)
    if tol < 0:
        tol = 0.0

    # CRITICAL: convert to signed type before subtracting to avoid uint8 wraparound.
    img = rgb[:, :, :3].astype(np.int32, copy=False)
    target = np.array([int(target_rgb[0]), int(target_rgb[1]), int(target_rgb[2])], dtype=np.int32)

    diff = img - target                        # HxWx3 int32
    d2 = (diff * diff).sum(axis=2)             # HxW
    return d2 <= tol * tol
