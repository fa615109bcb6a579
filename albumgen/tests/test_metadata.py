"""Tests for MetadataCollector and related types."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from albumgen.errors import ProcessingError
from albumgen.metadata import (
    MediaProperties,
    MetadataCollector,
    SyntheticClock,
    TimestampRecord,
    average_megapixels,
    parse_exif_date,
)
from albumgen.progress import ProgressTracker
from albumgen.source_file import SourceFile

from conftest import FakeToolbox, exif_tags


def source(name):
    return SourceFile(f"/photos/{name}", 'image')


class TestParseExifDate:
    """Tests for EXIF date parsing."""

    def test_basic(self):
        """Test a regular EXIF date."""
        assert parse_exif_date('2020:01:02 03:04:05') == 1577934245

    def test_suffixes_ignored(self):
        """Test sub-second and timezone suffixes are ignored."""
        assert parse_exif_date('2020:01:02 03:04:05.123+02:00') == 1577934245

    @pytest.mark.parametrize('value', [None, '', 'yesterday', '0000:00:00 00:00:00', 1577934245])
    def test_invalid(self, value):
        """Test missing or malformed dates."""
        assert parse_exif_date(value) is None


class TestTimestampRecord:
    """Tests for TimestampRecord."""

    def test_date_for_real_stamp(self):
        """Test real stamps carry a date string."""
        assert TimestampRecord(1577934245).date == '2020-01-02 03:04'

    def test_no_date_for_synthetic_stamp(self):
        """Test synthetic stamps carry no date."""
        assert TimestampRecord(3, synthetic=True).date is None


class TestSyntheticClock:
    """Tests for SyntheticClock."""

    def test_strictly_increasing(self):
        """Test each value is one more than the last."""
        clock = SyntheticClock()

        values = [clock.next().value for _ in range(3)]

        assert values == [1, 2, 3]
        assert clock.last == 3

    def test_concurrent_values_unique(self):
        """Test concurrent callers never get the same value."""
        clock = SyntheticClock()

        with ThreadPoolExecutor(max_workers=8) as pool:
            values = list(pool.map(lambda _: clock.next().value, range(200)))

        assert sorted(values) == list(range(1, 201))


class TestMediaProperties:
    """Tests for MediaProperties."""

    def test_megapixels(self):
        """Test megapixel computation."""
        props = MediaProperties(4000, 3000, 'JPEG', 1, TimestampRecord(0))

        assert props.megapixels == 12.0
        assert props.size == (4000, 3000)
        assert props.original_size is None

    @pytest.mark.parametrize('orientation,transposed', [
        (1, False), (2, False), (3, False), (4, False),
        (5, True), (6, True), (7, True), (8, True),
    ])
    def test_is_transposed(self, orientation, transposed):
        """Test which orientations swap width and height."""
        props = MediaProperties(10, 20, 'JPEG', orientation, TimestampRecord(0))

        assert props.is_transposed is transposed


class TestAverageMegapixels:
    """Tests for batch statistics."""

    def test_average(self):
        """Test the average over a batch."""
        props = [
            MediaProperties(1000, 1000, 'JPEG', 1, TimestampRecord(0)),
            MediaProperties(3000, 1000, 'JPEG', 1, TimestampRecord(0)),
        ]

        assert average_megapixels(props) == pytest.approx(2.0)

    def test_empty(self):
        """Test an empty batch."""
        assert average_megapixels([]) == 0.0


class TestMetadataCollector:
    """Tests for MetadataCollector class."""

    def test_analyze_basic(self, logger):
        """Test dimensions, type, orientation and capture time."""
        toolbox = FakeToolbox(metadata={
            'a.jpg': exif_tags((4000, 3000), '2020:01:02 03:04:05', Orientation=6,
                               OriginalImageWidth=6000, OriginalImageHeight=4000),
        })
        collector = MetadataCollector(toolbox, logger=logger)

        props = collector.analyze(source('a.jpg'))

        assert props.size == (4000, 3000)
        assert props.file_type == 'JPEG'
        assert props.orientation == 6
        assert props.original_size == (6000, 4000)
        assert props.timestamp == TimestampRecord(1577934245)
        assert props.timestamp_source == 'DateTimeOriginal'

    def test_timestamp_priority(self, logger):
        """Test capture time wins over modification and creation time."""
        toolbox = FakeToolbox(metadata={
            'a.jpg': exif_tags((10, 10), None,
                               ModifyDate='2021:01:01 00:00:00',
                               CreateDate='2019:01:01 00:00:00'),
            'b.jpg': exif_tags((10, 10), None, CreateDate='2019:01:01 00:00:00'),
        })
        collector = MetadataCollector(toolbox, logger=logger)

        assert collector.analyze(source('a.jpg')).timestamp_source == 'ModifyDate'
        assert collector.analyze(source('b.jpg')).timestamp_source == 'CreateDate'

    def test_synthetic_timestamps(self, logger):
        """Test files without capture time get increasing synthetic stamps."""
        toolbox = FakeToolbox(metadata={
            'a.jpg': exif_tags((10, 10)),
            'b.jpg': exif_tags((10, 10), '2020:01:02 03:04:05'),
            'c.jpg': exif_tags((10, 10), '0000:00:00 00:00:00'),
        })
        clock = SyntheticClock()
        collector = MetadataCollector(toolbox, clock, logger=logger)

        analyzed = [collector.analyze(source(name)) for name in ('a.jpg', 'b.jpg', 'c.jpg')]
        assert [p.timestamp is None for p in analyzed] == [True, False, True]

        a, b, c = collector.stamp_undated(analyzed)

        assert a.timestamp == TimestampRecord(1, synthetic=True)
        assert b.timestamp.synthetic is False
        assert c.timestamp == TimestampRecord(2, synthetic=True)
        assert a.timestamp_source is None

    def test_fallback_dimensions(self, logger):
        """Test SourceImageWidth/Height are used when ImageWidth is missing."""
        toolbox = FakeToolbox(metadata={
            'a.tif': {'SourceImageWidth': 800, 'SourceImageHeight': 600, 'FileType': 'TIFF'},
        })

        props = MetadataCollector(toolbox, logger=logger).analyze(source('a.tif'))

        assert props.size == (800, 600)
        assert props.orientation == 1

    def test_missing_dimensions(self, logger):
        """Test files without dimensions are a processing error."""
        toolbox = FakeToolbox(metadata={'a.jpg': {'FileType': 'JPEG'}})

        with pytest.raises(ProcessingError):
            MetadataCollector(toolbox, logger=logger).analyze(source('a.jpg'))

    def test_reports_progress(self, logger):
        """Test each analyzed file is reported."""
        toolbox = FakeToolbox(metadata={'a.jpg': exif_tags((10, 10))})
        progress = ProgressTracker(logger=logger)
        progress.start('Analyzing', 1)

        MetadataCollector(toolbox, progress=progress, logger=logger).analyze(source('a.jpg'))

        assert progress.completed == 1

    def test_stamps_follow_input_order(self, logger):
        """Test synthetic stamps follow input order, not analysis order."""
        toolbox = FakeToolbox(metadata={name: exif_tags((10, 10)) for name in ('a.jpg', 'b.jpg', 'c.jpg')})
        collector = MetadataCollector(toolbox, logger=logger)

        c = collector.analyze(source('c.jpg'))
        a = collector.analyze(source('a.jpg'))
        b = collector.analyze(source('b.jpg'))
        stamped = collector.stamp_undated([a, b, c])

        assert [p.timestamp.value for p in stamped] == [1, 2, 3]
        assert all(p.timestamp.synthetic for p in stamped)

    def test_stamp_undated_keeps_real_stamps(self, logger):
        """Test dated files are passed through unchanged."""
        toolbox = FakeToolbox(metadata={'a.jpg': exif_tags((10, 10), '2020:01:02 03:04:05')})
        collector = MetadataCollector(toolbox, logger=logger)
        props = collector.analyze(source('a.jpg'))

        assert collector.stamp_undated([props]) == [props]
        assert collector.clock.last == 0
