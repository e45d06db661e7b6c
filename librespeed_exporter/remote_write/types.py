"""Time series value types sent over remote write."""

from dataclasses import dataclass
from typing import Sequence

METRIC_NAME_LABEL = "__name__"


@dataclass(frozen=True)
class Label:
    name: str
    value: str


@dataclass(frozen=True)
class Sample:
    value: float
    timestamp: int  # milliseconds since epoch


@dataclass(frozen=True)
class TimeSeries:
    """A labelled series carrying exactly one sample."""

    labels: tuple[Label, ...]
    sample: Sample

    def __post_init__(self) -> None:
        names = [label.name for label in self.labels]
        if len(names) != len(set(names)):
            raise ValueError(f"Duplicate label names in time series: {names}")

    @property
    def name(self) -> str:
        return get_label_value(self.labels, METRIC_NAME_LABEL)


Batch = list[TimeSeries]


def get_label_value(labels: Sequence[Label], name: str) -> str:
    """Return the value of the label called name, or an empty string."""
    for label in labels:
        if label.name == name:
            return label.value
    return ""
