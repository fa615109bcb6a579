"""
Pytest fixtures for albumgen tests.
"""

import logging
import os
import threading
import time

import pytest
from PIL import Image, ImageFilter

from albumgen.errors import ProcessingError


class FakeToolbox:
    """
    Stands in for the external tools, doing the pixel work with Pillow.

    Metadata can be overridden per source file name and metadata reads can
    be delayed per file name; everything else is derived from the actual
    image files.
    """

    def __init__(self, metadata=None, faces=None, fail_on=None, delays=None):
        self.metadata = metadata or {}
        self.delays = delays or {}
        self.faces = faces or {}
        self.fail_on = fail_on
        self.optimizers = []
        self.checked = None
        self.calls = []
        self._lock = threading.Lock()

    def _record(self, name, path):
        with self._lock:
            self.calls.append((name, os.path.basename(path)))

    def calls_to(self, name):
        return [path for call, path in self.calls if call == name]

    def check(self, required):
        self.checked = list(required)

    def read_metadata(self, path):
        self._record('read_metadata', path)
        name = os.path.basename(path)
        if name in self.delays:
            time.sleep(self.delays[name])
        if self.fail_on == name:
            raise ProcessingError("exiftool failed: broken file", path=path)
        if name in self.metadata:
            return dict(self.metadata[name])
        with Image.open(path) as img:
            return {'ImageWidth': img.width, 'ImageHeight': img.height, 'FileType': img.format}

    def auto_rotate(self, path):
        self._record('auto_rotate', path)
        with Image.open(path) as img:
            img.transpose(Image.Transpose.ROTATE_270).save(path)

    def optimize(self, path):
        self._record('optimize', path)
        return False

    def resize(self, src, dst, bounds, quality, srgb=True, auto_orient=False):
        self._record('resize', src)
        with Image.open(src) as img:
            img = img.convert('RGB')
            if auto_orient:
                img = img.transpose(Image.Transpose.ROTATE_270)
            img.thumbnail(bounds)
            img.save(dst, quality=quality)

    def thumbnail(self, src, dst, scaled, final, offset, quality, srgb=True):
        self._record('thumbnail', src)
        with Image.open(src) as img:
            img = img.convert('RGB').resize(scaled)
            box = (offset[0], offset[1], offset[0] + final[0], offset[1] + final[1])
            img.crop(box).save(dst, format='JPEG', quality=quality)

    def blur(self, src, dst, size, radius, quality=40):
        self._record('blur', src)
        with Image.open(src) as img:
            img = img.convert('RGB').resize(size).filter(ImageFilter.GaussianBlur(radius))
            img.save(dst, format='JPEG', quality=quality)

    def detect_face(self, path):
        self._record('detect_face', path)
        return self.faces.get(os.path.splitext(os.path.basename(path))[0])

    def extract_frame(self, src, dst, seconds=1.0):
        self._record('extract_frame', src)
        Image.new('RGB', (320, 180), color='green').save(dst, format='JPEG')

    def transcode(self, src, dst, fmt, bounds):
        self._record('transcode', src)
        with open(dst, 'wb') as f:
            f.write(f"{fmt} stream".encode())


def make_image(directory, name, size=(400, 300), color='red'):
    """Write a solid color image and return its path."""
    path = os.path.join(str(directory), name)
    fmt = 'PNG' if name.lower().endswith('.png') else 'JPEG'
    Image.new('RGB', size, color=color).save(path, format=fmt)
    return path


def exif_tags(size, date=None, **extra):
    """exiftool-style tag mapping for a fake source file."""
    tags = {'ImageWidth': size[0], 'ImageHeight': size[1], 'FileType': 'JPEG'}
    if date is not None:
        tags['DateTimeOriginal'] = date
    tags.update(extra)
    return tags


@pytest.fixture
def fake_toolbox():
    """Fixture providing a Pillow-backed toolbox."""
    return FakeToolbox()


@pytest.fixture
def input_dir(tmp_path):
    """Fixture providing an empty input directory."""
    path = tmp_path / 'photos'
    path.mkdir()
    return path


@pytest.fixture
def output_dir(tmp_path):
    """Fixture providing the gallery output directory path."""
    return tmp_path / 'gallery'


@pytest.fixture
def gallery_config(input_dir, output_dir):
    """Fixture providing a gallery configuration."""
    from albumgen.config import GalleryConfig

    return GalleryConfig(input_dir=str(input_dir), output_dir=str(output_dir))


@pytest.fixture
def prepared_output(gallery_config):
    """Fixture providing an output directory with the derived subdirectories."""
    for name in gallery_config.SUBDIRS:
        os.makedirs(gallery_config.subdir(name), exist_ok=True)
    return gallery_config


@pytest.fixture
def logger():
    """Fixture providing a logger."""
    return logging.getLogger('test')


def make_record(**overrides):
    """AssetRecord for a 1600x1200 image with sensible defaults."""
    from albumgen.asset_record import AssetRecord
    from albumgen.geometry import ThumbnailSpec
    from albumgen.metadata import TimestampRecord
    from albumgen.source_file import SourceFile

    fields = dict(
        source=SourceFile('/photos/a.jpg', 'image'),
        basename='a',
        image=('imgs/a.jpg', (1600, 1200)),
        thumb_path='thumbs/a.jpg',
        thumb=ThumbnailSpec((1600, 1200), (150, 112), (150, 112), (0, 0)),
        blur='blurs/a.jpg',
        timestamp=TimestampRecord(1577934245),
    )
    fields.update(overrides)
    return AssetRecord(**fields)
