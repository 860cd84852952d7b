"""
HDF5 I/O functions for pybiofusion.

This module saves and loads FusionModel objects to/from HDF5, an
alternative to the text z-norm table in a model directory.

Note: Requires h5py package. Install with: pip install h5py
"""

import logging
import warnings
from pathlib import Path
from typing import Optional, Union

import numpy as np

from ..core import AlgorithmCalibration, ConfigError, FusionModel, ParseError

# Try to import h5py, but make it optional
try:
    import h5py
    HAS_H5PY = True
except ImportError:
    HAS_H5PY = False
    h5py = None

logger = logging.getLogger(__name__)


def _check_h5py():
    """Check if h5py is available and raise helpful error if not."""
    if not HAS_H5PY:
        raise ImportError(
            "h5py is required for HDF5 I/O operations. "
            "Install it with: pip install h5py"
        )


def save_model_hdf5(
    model: FusionModel,
    filename: Union[str, Path],
    compression: Optional[str] = 'gzip'
):
    """
    Save a FusionModel to an HDF5 file.

    Parameters
    ----------
    model : FusionModel
        Model to save
    filename : str or Path
        Path to output HDF5 file
    compression : str, optional
        Compression algorithm ('gzip', 'lzf', or None). Default: 'gzip'

    Examples
    --------
    >>> model = FusionModel([AlgorithmCalibration('a', 0.0, 1.0),
    ...                      AlgorithmCalibration('b', 5.0, 2.0)])
    >>> save_model_hdf5(model, 'fusion_model.h5')
    """
    _check_h5py()

    if not isinstance(model, FusionModel):
        raise TypeError(f"Expected FusionModel object, got {type(model)}")

    with h5py.File(filename, 'w') as f:
        f.create_dataset(
            'algorithms',
            data=np.array(model.algorithms, dtype='S'),
            compression=compression
        )
        f.create_dataset('positions', data=model.positions, compression=compression)
        f.create_dataset('scales', data=model.scales, compression=compression)
        if model.is_weighted:
            f.create_dataset(
                'weights',
                data=np.asarray(model.weights, dtype=float),
                compression=compression
            )
            f.attrs['offset'] = model.offset

        f.attrs['type'] = 'FusionModel'
        f.attrs['version'] = '1.0'

    logger.info("Saved %r to %s", model, filename)


def load_model_hdf5(filename: Union[str, Path]) -> FusionModel:
    """
    Load a FusionModel from an HDF5 file.

    Raises
    ------
    ConfigError
        If the file cannot be opened
    ParseError
        If the file does not hold a valid model
    """
    _check_h5py()

    try:
        f = h5py.File(filename, 'r')
    except OSError as exc:
        raise ConfigError(f"Cannot open HDF5 model {filename}: {exc}") from exc

    with f:
        if f.attrs.get('type') != 'FusionModel':
            warnings.warn(
                f"File does not have 'FusionModel' type marker. "
                f"Found: {f.attrs.get('type')}"
            )
        try:
            names = [name.decode('utf-8') for name in f['algorithms'][:]]
            positions = f['positions'][:]
            scales = f['scales'][:]
            weights = f['weights'][:] if 'weights' in f else None
            offset = float(f.attrs.get('offset', 0.0))
        except KeyError as exc:
            raise ParseError(f"HDF5 model {filename} is missing {exc}") from exc

    try:
        if not (len(names) == len(positions) == len(scales)):
            raise ValueError("algorithms, positions and scales differ in length")
        calibrations = tuple(
            AlgorithmCalibration(name, float(pos), float(scale))
            for name, pos, scale in zip(names, positions, scales)
        )
        model = FusionModel(
            calibrations,
            None if weights is None else tuple(weights),
            offset
        )
    except ValueError as exc:
        raise ParseError(f"HDF5 model {filename}: {exc}") from exc

    return model
