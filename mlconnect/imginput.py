"""Image input connector: reads, resizes and splits image data."""

from __future__ import annotations

import io
import logging
import math
import random
from typing import Any

from PIL import Image

from mlconnect.inputconn import (
    InputConnectorBadParamError,
    InputConnectorStrategy,
    read_element,
)

logger = logging.getLogger(__name__)


class DDImg:
    """Reader of a single image, in colour or grayscale."""

    def __init__(self, bw: bool = False) -> None:
        self.bw = bw
        self.img: Image.Image | None = None

    @property
    def _mode(self) -> str:
        return "L" if self.bw else "RGB"

    def read_file(self, fname: str) -> bool:
        """Load the image file *fname*; returns whether it could be decoded."""
        try:
            with Image.open(fname) as image:
                self.img = image.convert(self._mode)
        except (OSError, ValueError):
            self.img = None
            return False
        return True

    def read_mem(self, content: str | bytes) -> bool:
        """Decode an encoded image held in memory; returns success."""
        data = content.encode("utf-8") if isinstance(content, str) else content
        try:
            with Image.open(io.BytesIO(data)) as image:
                self.img = image.convert(self._mode)
        except (OSError, ValueError):
            self.img = None
            return False
        return True

    def read_dir(self, dir: str) -> bool:
        """Reject directories: an image file is required."""
        raise InputConnectorBadParamError(
            f"uri {dir} is a directory, requires an image file"
        )


class ImgInputFileConn(InputConnectorStrategy):
    """Input connector turning image URIs into resized images."""

    def __init__(self) -> None:
        super().__init__()
        self.images: list[Image.Image] = []
        self.test_images: list[Image.Image] = []
        self.width = 227
        self.height = 227
        self.bw = False
        self.test_split = 0.0
        self.shuffle = False

    def init(self, ad: dict[str, Any]) -> None:
        """Initialise from the ``parameters/input`` object."""
        self.fillup_parameters(ad)

    def fillup_parameters(self, ad: dict[str, Any]) -> None:
        """Read the optional image parameters present in *ad*."""
        if "width" in ad:
            self.width = int(ad["width"])
        if "height" in ad:
            self.height = int(ad["height"])
        if "bw" in ad:
            self.bw = bool(ad["bw"])
        if "shuffle" in ad:
            self.shuffle = bool(ad["shuffle"])
        if "test_split" in ad:
            self.test_split = float(ad["test_split"])

    def feature_size(self) -> int:
        """Number of input values per image."""
        channels = 1 if self.bw else 3
        return self.width * self.height * channels

    def batch_size(self) -> int:
        return len(self.images)

    def test_batch_size(self) -> int:
        return len(self.test_images)

    def transform(self, ad: dict[str, Any]) -> None:
        """Read, resize, optionally shuffle and split the images of *ad*."""
        self.get_data(ad)
        input_params = ad.get("parameters", {}).get("input")
        if input_params is not None:
            self.fillup_parameters(input_params)

        for uri in self.uris:
            reader = DDImg(self.bw)
            if not read_element(uri, reader) or reader.img is None:
                raise InputConnectorBadParamError(f"no data for image {uri}")
            self.images.append(
                reader.img.resize((self.width, self.height), Image.Resampling.BILINEAR)
            )

        if self.shuffle:
            random.shuffle(self.images)

        if self.test_split > 0:
            split_size = math.floor(len(self.images) * (1.0 - self.test_split))
            self.test_images.extend(self.images[split_size:])
            del self.images[split_size:]
            logger.info(
                "data split test size=%d / remaining data size=%d",
                len(self.test_images),
                len(self.images),
            )

        if not self.images:
            raise InputConnectorBadParamError("no image could be found")