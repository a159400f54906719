"""
Land-Cover Class Scheme

Canonical land-cover categories shared by every stage of the analysis. Class
ids are the reclassified codes written by the raster provider; id 0 marks
nodata and is never part of a scheme.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

# Transition keys pack (from, to) as from * KEY_BASE + to
KEY_BASE = 100
NODATA_CLASS = 0


@dataclass(frozen=True)
class LandCoverClass:
    """One category of the scheme."""
    id: int
    name: str
    code: Optional[str] = None


class ClassScheme:
    """
    Ordered, immutable set of land-cover classes.

    Iteration follows the configured order, which is also the order of the
    category axis handed to the presentation layer.
    """

    def __init__(self, classes: Iterable[LandCoverClass],
                 remap: Optional[Tuple[List[int], List[int]]] = None):
        self._classes: Tuple[LandCoverClass, ...] = tuple(classes)
        if not self._classes:
            raise ValueError("A class scheme needs at least one class")

        seen = set()
        for lc in self._classes:
            if not isinstance(lc.id, int) or isinstance(lc.id, bool):
                raise ValueError(f"Class id must be an integer, got {lc.id!r}")
            if lc.id <= NODATA_CLASS or lc.id >= KEY_BASE:
                raise ValueError(
                    f"Class id {lc.id} outside 1..{KEY_BASE - 1} (0 is reserved for nodata)"
                )
            if lc.id in seen:
                raise ValueError(f"Duplicate class id {lc.id}")
            seen.add(lc.id)

        self._by_id: Dict[int, LandCoverClass] = {lc.id: lc for lc in self._classes}

        if remap is not None:
            from_classes, to_classes = remap
            if len(from_classes) != len(to_classes):
                raise ValueError("Reclassification lists must have the same length")
            unknown = sorted({c for c in to_classes if c != NODATA_CLASS and c not in self._by_id})
            if unknown:
                raise ValueError(f"Reclassification targets not in scheme: {unknown}")
            self._remap = (tuple(from_classes), tuple(to_classes))
        else:
            self._remap = None

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> 'ClassScheme':
        """Build the scheme from the ``classes`` and ``reclassification`` config sections."""
        classes = [
            LandCoverClass(id=int(entry['id']), name=str(entry['name']), code=entry.get('code'))
            for entry in config['classes']
        ]
        remap = None
        reclass = config.get('reclassification')
        if reclass:
            remap = (list(reclass['from_classes']), list(reclass['to_classes']))
        return cls(classes, remap=remap)

    def __iter__(self) -> Iterator[LandCoverClass]:
        return iter(self._classes)

    def __len__(self) -> int:
        return len(self._classes)

    def __contains__(self, class_id: object) -> bool:
        return class_id in self._by_id

    def __repr__(self) -> str:
        return f"ClassScheme({[lc.id for lc in self._classes]})"

    @property
    def ids(self) -> List[int]:
        return [lc.id for lc in self._classes]

    @property
    def names(self) -> List[str]:
        return [lc.name for lc in self._classes]

    def name_of(self, class_id: int) -> str:
        return self._by_id[class_id].name

    def remap_table(self) -> Dict[int, int]:
        """
        Raw source code -> canonical id lookup for raster providers.

        Raw codes missing from the table are nodata. Raises ValueError when
        the scheme was built without a reclassification.
        """
        if self._remap is None:
            raise ValueError("Class scheme has no reclassification table")
        return dict(zip(*self._remap))
