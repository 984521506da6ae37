"""Shared fixtures: a JSON-lines codec and in-memory readers/writers."""

import json
from pathlib import Path

import pytest

from lassort.codec.types import BoundingBox, Header, Point

SEGMENT_SUFFIX = ".jsonl"


def bounds_of(points: list[Point]) -> BoundingBox:
    if not points:
        return BoundingBox((0.0, 0.0, 0.0), (0.0, 0.0, 0.0))
    return BoundingBox(
        (min(p.x for p in points), min(p.y for p in points), min(p.z for p in points)),
        (max(p.x for p in points), max(p.y for p in points), max(p.z for p in points)),
    )


class ListReader:
    """Reader over an in-memory list of points."""

    def __init__(self, points: list[Point], header: Header | None = None):
        self._points = list(points)
        self.header = header or Header(len(self._points), bounds_of(self._points))
        self.closed = False

    def __iter__(self):
        yield from self._points

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.closed = True


class ListWriter:
    """Writer collecting points into a list."""

    def __init__(self, header: Header | None = None):
        self.header = header
        self.points: list[Point] = []
        self.finalized_count: int | None = None
        self.closed = False

    def write(self, point: Point) -> None:
        self.points.append(point)

    def finalize(self, record_count: int | None = None) -> int:
        if record_count is not None and record_count != len(self.points):
            raise RuntimeError("count mismatch")
        self.finalized_count = len(self.points)
        self.closed = True
        return self.finalized_count

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.closed = True


class JsonLinesReader(ListReader):
    def __init__(self, path: Path):
        lines = Path(path).read_text(encoding="utf-8").splitlines()
        meta = json.loads(lines[0])
        points = []
        for line in lines[1:]:
            x, y, z, payload = json.loads(line)
            points.append(Point(x, y, z, bytes.fromhex(payload)))
        header = Header(
            meta["record_count"],
            BoundingBox(tuple(meta["mins"]), tuple(meta["maxs"])),
            compressed=meta["compressed"],
        )
        super().__init__(points, header)


class JsonLinesWriter(ListWriter):
    """Writes the header line, with the final count, on finalize or close."""

    def __init__(self, path: Path, header: Header, fail_after: int | None = None):
        super().__init__(header)
        self.path = Path(path)
        self._fail_after = fail_after
        self.path.write_text("", encoding="utf-8")

    def write(self, point: Point) -> None:
        if self._fail_after is not None and len(self.points) >= self._fail_after:
            raise OSError(f"disk full writing {self.path}")
        super().write(point)

    def _commit(self) -> None:
        meta = {
            "record_count": len(self.points),
            "mins": list(self.header.bounds.mins),
            "maxs": list(self.header.bounds.maxs),
            "compressed": self.header.compressed,
        }
        lines = [json.dumps(meta)]
        lines.extend(json.dumps([p.x, p.y, p.z, p.payload.hex()]) for p in self.points)
        self.path.write_text("\n".join(lines) + "\n", encoding="utf-8")

    def finalize(self, record_count: int | None = None) -> int:
        count = super().finalize(record_count)
        self._commit()
        return count

    def __exit__(self, *exc_info):
        if self.finalized_count is None:
            self._commit()
        super().__exit__(*exc_info)


class JsonLinesCodec:
    """Codec storing points as JSON lines; `.jsonz` paths count as compressed."""

    segment_suffix = SEGMENT_SUFFIX

    def __init__(self, fail_segment_after: int | None = None):
        self.fail_segment_after = fail_segment_after
        self.opened_writers: list[JsonLinesWriter] = []

    def is_compressed(self, path: Path) -> bool:
        return Path(path).suffix == ".jsonz"

    def open_reader(self, path: Path) -> JsonLinesReader:
        return JsonLinesReader(path)

    def open_writer(self, path: Path, header: Header) -> JsonLinesWriter:
        fail_after = None
        if Path(path).suffix == SEGMENT_SUFFIX:
            fail_after = self.fail_segment_after
        writer = JsonLinesWriter(path, header, fail_after=fail_after)
        self.opened_writers.append(writer)
        return writer


def make_points(coords: list[tuple[float, float, float]]) -> list[Point]:
    """Points whose payload records their input position."""
    return [Point(x, y, z, idx.to_bytes(4, "little")) for idx, (x, y, z) in enumerate(coords)]


def write_jsonl_cloud(path: Path, points: list[Point]) -> Path:
    writer = JsonLinesWriter(path, Header(len(points), bounds_of(points)))
    for point in points:
        writer.write(point)
    writer.finalize(len(points))
    return path


@pytest.fixture
def codec() -> JsonLinesCodec:
    return JsonLinesCodec()


@pytest.fixture
def helpers():
    """Access to the in-memory test doubles and builders."""

    class Helpers:
        ListReader = ListReader
        ListWriter = ListWriter
        JsonLinesCodec = JsonLinesCodec
        make_points = staticmethod(make_points)
        write_jsonl_cloud = staticmethod(write_jsonl_cloud)
        bounds_of = staticmethod(bounds_of)

    return Helpers


def _write_las(path: Path, coords, point_format: int = 3, scale: float = 0.001) -> Path:
    """Write a LAS file whose intensity holds each point's input position."""
    import laspy
    import numpy as np

    xyz = np.asarray(coords, dtype=np.float64).reshape(-1, 3)
    header = laspy.LasHeader(point_format=point_format, version="1.2")
    header.scales = np.array([scale, scale, scale])
    header.offsets = np.array([0.0, 0.0, 0.0])

    las = laspy.LasData(header)
    las.x = xyz[:, 0]
    las.y = xyz[:, 1]
    las.z = xyz[:, 2]
    las.intensity = np.arange(len(xyz), dtype=np.uint16)
    las.write(str(path))
    return Path(path)


@pytest.fixture
def write_las():
    """Factory writing a small LAS file: write_las(path, coords, point_format=3)."""
    return _write_las
