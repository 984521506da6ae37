"""lassort - Group point-cloud records by spatial cell."""

from lassort.sorter import SortSession, main_partition, partition

__all__ = ["SortSession", "partition", "main_partition"]
