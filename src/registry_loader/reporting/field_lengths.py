"""Field length analysis over an input batch, before any mapping."""

from dataclasses import dataclass, field
from typing import Optional, Sequence

from registry_loader.mapping.columns import max_lengths
from registry_loader.models.raw import RawRecord


@dataclass
class FieldLengthStats:
    name: str
    max_length: int = 0
    longest_record: Optional[str] = None
    over_threshold: int = 0
    declared_limit: Optional[int] = None
    over_limit: int = 0
    samples: list[tuple[int, str]] = field(default_factory=list)


def analyze_field_lengths(
    records: Sequence[RawRecord],
    *,
    threshold: int = 100,
) -> list[FieldLengthStats]:
    """
    Per-field longest value and how many values exceed the threshold and the
    column's declared limit. Fields whose longest value exceeds the threshold
    are returned, longest first.
    """
    limits = max_lengths()
    stats: dict[str, FieldLengthStats] = {}
    for record in records:
        for name, value in record.data.items():
            entry = stats.setdefault(name, FieldLengthStats(name=name, declared_limit=limits.get(name)))
            length = len(str(value)) if value is not None else 0
            if length > entry.max_length:
                entry.max_length = length
                entry.longest_record = record.label
            if length > threshold:
                entry.over_threshold += 1
                entry.samples.append((length, record.label))
            if entry.declared_limit is not None and length > entry.declared_limit:
                entry.over_limit += 1

    flagged = [s for s in stats.values() if s.max_length > threshold]
    for s in flagged:
        s.samples = sorted(s.samples, reverse=True)[:3]
    return sorted(flagged, key=lambda s: s.max_length, reverse=True)
