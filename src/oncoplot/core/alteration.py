"""
oncoplot/core/alteration
~~~~~~~~~~~~~~~~~~~~~~~~
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

# Copy-number categories recognised when a record does not flag them explicitly
CNV_EVENTS: Tuple[str, ...] = ("Amp", "Del")
MULTI_HIT = "Multi_Hit"
COMPLEX_EVENT = "Complex_Event"
LABEL_SEP = ";"
NO_ALTERATION = ""


@dataclass(frozen=True)
class Alteration:
    """
    Data class for the collapsed alteration state of one (gene, sample) cell.

    A cell carries at most one point-mutation category and at most one
    copy-number category. Both unset means the cell is not altered.
    """

    mutation: Optional[str] = None
    copy_number: Optional[str] = None

    @property
    def is_altered(self) -> bool:
        return self.mutation is not None or self.copy_number is not None

    @property
    def is_composite(self) -> bool:
        return self.mutation is not None and self.copy_number is not None

    @property
    def primary(self) -> Optional[str]:
        """The mutation category if present, otherwise the copy-number category."""
        return self.mutation if self.mutation is not None else self.copy_number

    @property
    def secondary(self) -> Optional[str]:
        """The copy-number category of a composite cell, otherwise None."""
        return self.copy_number if self.mutation is not None else None

    @property
    def label(self) -> str:
        """
        Returns the delimited label used in the serialized matrix.

        Returns:
            str: "" for no alteration, a single category, or "mutation;copy-number".
        """
        parts = [p for p in (self.mutation, self.copy_number) if p is not None]
        return LABEL_SEP.join(parts)

    @classmethod
    def from_label(cls, label: str, cnv_events: Iterable[str] = CNV_EVENTS) -> Alteration:
        """
        Parses a delimited cell label back into an Alteration.

        Args:
            label (str): Cell label, e.g. "Missense_Mutation;Amp".
            cnv_events (Iterable[str]): Categories treated as copy-number events when
                a label holds a single part. Defaults to ("Amp", "Del").

        Returns:
            Alteration: Parsed alteration.

        Raises:
            ValueError: If the label holds more than two delimited parts.
        """
        if label is None or label == NO_ALTERATION:
            return cls()
        parts = str(label).split(LABEL_SEP)
        if len(parts) > 2:
            raise ValueError(
                f"Alteration label {label!r} has {len(parts)} parts; at most a "
                "mutation and a copy-number category are supported"
            )
        if len(parts) == 2:
            return cls(mutation=parts[0], copy_number=parts[1])
        cnv = set(cnv_events) | {COMPLEX_EVENT}
        if parts[0] in cnv:
            return cls(copy_number=parts[0])
        return cls(mutation=parts[0])


def collapse_categories(
    mutations: Iterable[str],
    copy_numbers: Iterable[str] = (),
) -> Alteration:
    """
    Collapses every category observed for one (gene, sample) pair into an Alteration.

    Args:
        mutations (Iterable[str]): Point-mutation categories observed.
        copy_numbers (Iterable[str]): Copy-number categories observed.

    Returns:
        Alteration: Multiple distinct mutation categories become "Multi_Hit" and
            multiple distinct copy-number categories become "Complex_Event".
    """
    muts = list(dict.fromkeys(m for m in mutations if m))
    cns = list(dict.fromkeys(c for c in copy_numbers if c))
    mutation = None
    if len(muts) == 1:
        mutation = muts[0]
    elif len(muts) > 1:
        mutation = MULTI_HIT
    copy_number = None
    if len(cns) == 1:
        copy_number = cns[0]
    elif len(cns) > 1:
        copy_number = COMPLEX_EVENT
    return Alteration(mutation=mutation, copy_number=copy_number)


def order_labels(alterations: Iterable[Alteration]) -> List[str]:
    """
    Orders the distinct non-empty labels of a set of cells by code priority.

    Single mutation categories come first in first-seen order, then "Multi_Hit",
    then single copy-number categories in first-seen order, then "Complex_Event",
    then composite labels sorted lexicographically.
    """
    mutations: Dict[str, None] = {}
    copy_numbers: Dict[str, None] = {}
    composites = set()
    for alt in alterations:
        if not alt.is_altered:
            continue
        if alt.is_composite:
            composites.add(alt.label)
        elif alt.mutation is not None:
            mutations.setdefault(alt.mutation)
        else:
            copy_numbers.setdefault(alt.copy_number)
    ordered = [m for m in mutations if m != MULTI_HIT]
    if MULTI_HIT in mutations:
        ordered.append(MULTI_HIT)
    ordered.extend(c for c in copy_numbers if c != COMPLEX_EVENT)
    if COMPLEX_EVENT in copy_numbers:
        ordered.append(COMPLEX_EVENT)
    ordered.extend(sorted(composites))
    return ordered


class CategoryCodes:
    """
    Class for the bijection between category labels and integer codes.

    Code 0 is reserved for "no alteration" (the empty label).
    """

    def __init__(self, labels: Sequence[str]) -> None:
        """
        Initializes the CategoryCodes instance.

        Args:
            labels (Sequence[str]): Non-empty labels in code order; codes start at 1.

        Raises:
            ValueError: If labels are duplicated or contain the empty label.
        """
        labels = [str(lab) for lab in labels]
        if len(set(labels)) != len(labels):
            raise ValueError("Category labels must be unique")
        if NO_ALTERATION in labels:
            raise ValueError("The empty label is reserved for code 0")
        self._labels: Tuple[str, ...] = (NO_ALTERATION, *labels)
        self._codes: Dict[str, int] = {lab: i for i, lab in enumerate(self._labels)}

    @property
    def labels(self) -> List[str]:
        """Non-empty labels in code order."""
        return list(self._labels[1:])

    def code(self, label: str) -> int:
        """
        Returns the integer code of a label.

        Raises:
            KeyError: If the label has no code.
        """
        try:
            return self._codes[label]
        except KeyError:
            raise KeyError(f"No category code for label {label!r}") from None

    def label(self, code: int) -> str:
        """
        Returns the label of an integer code.

        Raises:
            KeyError: If the code is out of range.
        """
        code = int(code)
        if code < 0 or code >= len(self._labels):
            raise KeyError(f"No category label for code {code}")
        return self._labels[code]

    def as_dict(self) -> Dict[str, int]:
        """Returns label → code, including "" → 0."""
        return dict(self._codes)

    def __contains__(self, label: object) -> bool:
        return label in self._codes

    def __len__(self) -> int:
        return len(self._labels) - 1

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CategoryCodes):
            return NotImplemented
        return self._labels == other._labels

    def __repr__(self) -> str:
        return f"CategoryCodes({list(self._labels[1:])!r})"
