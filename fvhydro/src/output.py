"""
Snapshot collection and HDF5 output.

File layout, one group per snapshot in time order:

    /snapshot_00000
        attrs: time, prim_names, cons_names, i_in, i_out
        x          (n_all,)
        conserved  (n_eq, n_all)
        primitive  (n_eq, n_all)
"""

import logging
from pathlib import Path
from typing import List, Union

import h5py
import numpy as np

from .state import Snapshot

logger = logging.getLogger(__name__)


class SnapshotRecorder:
    """
    Observer storing every snapshot it is handed.

    Register with Solver1D.add_observer; the solver hands over snapshots at
    the start, at every output interval and at the end of a run.
    """

    def __init__(self):
        self.snapshots: List[Snapshot] = []

    def __call__(self, snapshot: Snapshot):
        self.snapshots.append(snapshot)

    def __len__(self):
        return len(self.snapshots)

    @property
    def times(self) -> np.ndarray:
        return np.array([s.time for s in self.snapshots])

    def write_hdf5(self, path: Union[str, Path]):
        write_hdf5(path, self.snapshots)


def write_hdf5(path: Union[str, Path], snapshots: List[Snapshot]):
    """Write snapshots to an HDF5 file, replacing it if present."""
    with h5py.File(path, 'w') as f:
        for n, snap in enumerate(snapshots):
            group = f.create_group(f'snapshot_{n:05d}')
            group.attrs['time'] = snap.time
            group.attrs['prim_names'] = list(snap.prim_names)
            group.attrs['cons_names'] = list(snap.cons_names)
            group.attrs['i_in'] = snap.interior.start
            group.attrs['i_out'] = snap.interior.stop - 1
            group.create_dataset('x', data=snap.x)
            group.create_dataset('conserved', data=snap.conserved)
            group.create_dataset('primitive', data=snap.primitive)
    logger.info(f"Wrote {len(snapshots)} snapshots to {path}")


def _names(attr) -> tuple:
    return tuple(n.decode() if isinstance(n, bytes) else str(n) for n in attr)


def read_hdf5(path: Union[str, Path]) -> List[Snapshot]:
    """Read snapshots written by write_hdf5."""
    snapshots = []
    with h5py.File(path, 'r') as f:
        for key in sorted(f.keys()):
            group = f[key]
            conserved = group['conserved'][()]
            primitive = group['primitive'][()]
            conserved.flags.writeable = False
            primitive.flags.writeable = False
            snapshots.append(Snapshot(
                time=float(group.attrs['time']),
                conserved=conserved,
                primitive=primitive,
                x=group['x'][()],
                interior=slice(int(group.attrs['i_in']), int(group.attrs['i_out']) + 1),
                prim_names=_names(group.attrs['prim_names']),
                cons_names=_names(group.attrs['cons_names']),
            ))
    return snapshots
