"""Selection and batching of annotations for the different output surfaces."""

from collections.abc import Iterator, Sequence

from report_annotator.models.result import Annotation

# Hard limit of the check-runs API for annotations in a single request.
MAX_ANNOTATIONS_PER_REQUEST = 50


def filter_annotations(
    annotations: Sequence[Annotation], *, include_notices: bool
) -> Sequence[Annotation]:
    """Drop notice-level annotations unless they were explicitly requested."""
    return [
        annotation
        for annotation in annotations
        if include_notices or annotation.annotation_level != "notice"
    ]


def chunked[T](items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    """Yield consecutive slices of at most ``size`` items, preserving order."""
    if size < 1:
        raise ValueError(f"Chunk size must be positive, got {size}")
    for start in range(0, len(items), size):
        yield items[start : start + size]
