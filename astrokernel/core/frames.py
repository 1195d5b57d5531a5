# astrokernel/core/frames.py
# -----------------------------------------------------------------------------
# Reference Frame Tree
#
# Frames live in a FrameTree arena addressed by integer index and interned
# name. Each non-root frame knows its parent index and a provider giving the
# transform from the frame to its parent at any date. Acyclicity is checked
# when a frame is inserted or re-attached, never at lookup time.
#
# Transform between two frames:
#   1. walk both frames up to the root
#   2. find the lowest common ancestor
#   3. compose the source path up to it, then the inverse of the target path
#
# Each frame caches its most recent transform-to-parent keyed by date; a miss
# recomputes and replaces it. Caches are not protected against concurrent
# mutation.
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Iterator, List, Optional, Union

from astrokernel.core.dates import AbsoluteDate
from astrokernel.core.errors import ConfigurationError, UnrelatedFrames
from astrokernel.core.transform import Transform

if TYPE_CHECKING:
    from astrokernel.core.synchronizer import FrameSynchronizer

__all__ = [
    "TransformProvider",
    "FixedTransformProvider",
    "FrameTree",
    "Frame",
]

log = logging.getLogger(__name__)

# ───────────────────────────── Providers ─────────────────────────────

class TransformProvider(ABC):
    """Source of the transform from a frame to its parent."""

    @abstractmethod
    def get_transform(self, date: AbsoluteDate) -> Transform:
        """Transform from the frame to its parent at ``date``."""


class FixedTransformProvider(TransformProvider):
    """Date-independent relation, e.g. a body frame mounted on its parent."""

    def __init__(self, transform: Transform):
        self._transform = transform

    def get_transform(self, date: AbsoluteDate) -> Transform:
        return self._transform.with_date(date)

    def __repr__(self) -> str:
        return f"FixedTransformProvider({self._transform!r})"

# ───────────────────────────── Arena ─────────────────────────────

@dataclass
class _FrameRecord:
    name: str
    parent: Optional[int]
    provider: Optional[TransformProvider]
    pseudo_inertial: bool
    synchronizer: Optional["FrameSynchronizer"] = None
    cache_date: Optional[AbsoluteDate] = None
    cache: Optional[Transform] = None


ParentRef = Union["Frame", str]


class FrameTree:
    """Single-root hierarchy of frames."""

    def __init__(self, root_name: str = "GCRF"):
        self._records: List[_FrameRecord] = []
        self._index: Dict[str, int] = {}
        self._insert(_FrameRecord(self._check_name(root_name), None, None, True))

    # Construction

    def _check_name(self, name: str) -> str:
        if not isinstance(name, str) or not name:
            raise ConfigurationError(f"Frame name must be a non-empty string, got {name!r}",
                                     frame=name)
        if name in self._index:
            raise ConfigurationError(f"Frame {name!r} already exists", frame=name)
        return sys.intern(name)

    def _insert(self, record: _FrameRecord) -> "Frame":
        index = len(self._records)
        self._records.append(record)
        self._index[record.name] = index
        return Frame(self, index)

    def _resolve_parent(self, name: str, parent: ParentRef) -> int:
        if isinstance(parent, Frame):
            if parent.tree is not self:
                raise ConfigurationError(
                    f"Parent {parent.name!r} of {name!r} belongs to another frame tree",
                    frame=name, parent=parent.name)
            return parent.index
        if parent == name:
            raise ConfigurationError(f"Frame {name!r} cannot be its own parent",
                                     frame=name, parent=parent)
        if parent not in self._index:
            raise ConfigurationError(f"Unknown parent frame {parent!r} for {name!r}",
                                     frame=name, parent=parent)
        return self._index[parent]

    @staticmethod
    def _as_provider(name: str, provider) -> TransformProvider:
        if isinstance(provider, Transform):
            return FixedTransformProvider(provider)
        if not isinstance(provider, TransformProvider):
            raise ConfigurationError(f"Frame {name!r} needs a TransformProvider, got {provider!r}",
                                     frame=name)
        return provider

    def add_frame(self, name: str, parent: ParentRef,
                  provider: Union[TransformProvider, Transform],
                  pseudo_inertial: bool = False) -> "Frame":
        """Insert a frame below ``parent``.

        Raises:
            ConfigurationError: duplicate name, unknown or foreign parent,
                self-parenting or missing provider
        """
        name = self._check_name(name)
        parent_index = self._resolve_parent(name, parent)
        record = _FrameRecord(name, parent_index, self._as_provider(name, provider), pseudo_inertial)
        frame = self._insert(record)
        log.debug(f"Frame {name} added under {self._records[parent_index].name}")
        return frame

    def add_synchronized_frame(self, name: str, parent: ParentRef,
                               provider: TransformProvider,
                               synchronizer: "FrameSynchronizer",
                               pseudo_inertial: bool = False) -> "Frame":
        """Insert a frame whose transform follows ``synchronizer``'s date."""
        frame = self.add_frame(name, parent, provider, pseudo_inertial)
        synchronizer.add_frame(frame)
        return frame

    def reattach(self, frame: "Frame", new_parent: ParentRef,
                 provider: Union[TransformProvider, Transform]) -> None:
        """Move ``frame`` (and its subtree) under ``new_parent``.

        Raises:
            ConfigurationError: the new parent chain would reach ``frame``
        """
        if frame.tree is not self:
            raise ConfigurationError(f"Frame {frame.name!r} belongs to another frame tree",
                                     frame=frame.name)
        record = self._records[frame.index]
        if record.parent is None:
            raise ConfigurationError(f"Root frame {record.name!r} cannot be re-attached",
                                     frame=record.name)
        parent_index = self._resolve_parent(record.name, new_parent)
        if frame.index in self._path_to_root(parent_index):
            raise ConfigurationError(
                f"Attaching {record.name!r} under {self._records[parent_index].name!r} creates a cycle",
                frame=record.name, parent=self._records[parent_index].name)
        record.parent = parent_index
        record.provider = self._as_provider(record.name, provider)
        record.cache_date = None
        record.cache = None
        log.debug(f"Frame {record.name} re-attached under {self._records[parent_index].name}")

    # Queries

    @property
    def root(self) -> "Frame":
        return Frame(self, 0)

    def get_frame(self, name: str) -> "Frame":
        try:
            return Frame(self, self._index[name])
        except KeyError:
            raise ConfigurationError(f"Unknown frame {name!r}", frame=name) from None

    def __contains__(self, name: str) -> bool:
        return name in self._index

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator["Frame"]:
        return (Frame(self, i) for i in range(len(self._records)))

    # Transforms

    def _path_to_root(self, index: int) -> List[int]:
        path = [index]
        parent = self._records[index].parent
        while parent is not None:
            path.append(parent)
            parent = self._records[parent].parent
        return path

    def _bind(self, index: int, synchronizer: "FrameSynchronizer") -> None:
        record = self._records[index]
        if record.synchronizer is not None and record.synchronizer is not synchronizer:
            raise ConfigurationError(f"Frame {record.name!r} already belongs to a synchronizer",
                                     frame=record.name)
        if record.parent is None:
            raise ConfigurationError(f"Root frame {record.name!r} cannot be synchronized",
                                     frame=record.name)
        record.synchronizer = synchronizer

    def _compute(self, index: int, date: AbsoluteDate) -> Transform:
        record = self._records[index]
        if record.provider is None:
            return Transform.identity(date)
        return record.provider.get_transform(date)

    def _commit(self, index: int, date: AbsoluteDate, transform: Transform) -> None:
        record = self._records[index]
        record.cache_date = date
        record.cache = transform

    def _transform_to_parent(self, index: int, date: AbsoluteDate) -> Transform:
        record = self._records[index]
        if record.cache is not None and record.cache_date == date:
            return record.cache
        if record.synchronizer is not None:
            # the whole group moves to the new date
            record.synchronizer.set_date(date)
            return record.cache
        transform = self._compute(index, date)
        self._commit(index, date, transform)
        return transform

    def _chain_to(self, path: List[int], date: AbsoluteDate) -> Transform:
        transform = Transform.identity(date)
        for index in path:
            transform = transform.compose(self._transform_to_parent(index, date))
        return transform

    def transform_between(self, source: int, target: int, date: AbsoluteDate) -> Transform:
        if source == target:
            return Transform.identity(date)
        source_path = self._path_to_root(source)
        target_path = self._path_to_root(target)
        target_set = set(target_path)
        ancestor = next(i for i in source_path if i in target_set)
        up = self._chain_to(source_path[:source_path.index(ancestor)], date)
        down = self._chain_to(target_path[:target_path.index(ancestor)], date)
        return up.compose(down.get_inverse())


class Frame:
    """Handle on one node of a FrameTree."""

    __slots__ = ("tree", "index")

    def __init__(self, tree: FrameTree, index: int):
        self.tree = tree
        self.index = index

    @property
    def _record(self) -> _FrameRecord:
        return self.tree._records[self.index]

    @property
    def name(self) -> str:
        return self._record.name

    @property
    def parent(self) -> Optional["Frame"]:
        parent = self._record.parent
        return None if parent is None else Frame(self.tree, parent)

    @property
    def is_root(self) -> bool:
        return self._record.parent is None

    @property
    def is_pseudo_inertial(self) -> bool:
        return self._record.pseudo_inertial

    @property
    def synchronizer(self) -> Optional["FrameSynchronizer"]:
        return self._record.synchronizer

    @property
    def cached_transform(self) -> Optional[Transform]:
        """Most recently computed transform to the parent, if any."""
        return self._record.cache

    def get_transform_to_parent(self, date: AbsoluteDate) -> Transform:
        return self.tree._transform_to_parent(self.index, date)

    def get_transform_to(self, target: "Frame", date: AbsoluteDate) -> Transform:
        """Transform mapping coordinates in this frame to ``target``.

        Raises:
            UnrelatedFrames: the frames belong to different trees
        """
        if target.tree is not self.tree:
            raise UnrelatedFrames(
                f"Frames {self.name!r} and {target.name!r} do not share a root",
                frame=self.name, target=target.name, date=str(date))
        return self.tree.transform_between(self.index, target.index, date)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Frame):
            return NotImplemented
        return self.tree is other.tree and self.index == other.index

    def __hash__(self) -> int:
        return hash((id(self.tree), self.index))

    def __repr__(self) -> str:
        return f"Frame({self.name!r})"

    def __str__(self) -> str:
        return self.name
