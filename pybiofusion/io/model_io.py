"""
Model directory I/O for pybiofusion.

A model directory holds whitespace-separated text files describing a
fusion scheme. Readers are used by the fusers' ``initialize`` and raise
ConfigError when a required file is absent or unreadable and ParseError
when it is present but malformed. Writers are offline tools and raise
ValueError on invalid arguments.

File formats
------------
z_norm.txt::

    Algorithm position scale
    Pluto_University 3.0012 0.2001
    Venus_Corporation 49.98 1.997

linear_fusion.txt::

    Pluto_University 1.7
    Venus_Corporation 0.4
    offset -2.1

candidate_fusion.txt::

    combiner product
    missing_score 1

t_concatenator.txt (first line K, optional per-algorithm layout)::

    2
    Pluto_University 16
    Venus_Corporation 20 0.5

t_comparator.txt::

    l1
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

import numpy as np

from ..config import DEFAULT_COMBINER, DEFAULT_COMPARATOR, DEFAULT_LAYOUT, ModelLayout
from ..core import AlgorithmCalibration, ConfigError, FusionModel, ParseError
from ..utils.validation import validate_algorithm_names

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

Z_NORM_HEADER = ("Algorithm", "position", "scale")


@dataclass(frozen=True)
class TemplateScheme:
    """
    Template fusion scheme read from a model directory.

    Attributes
    ----------
    k : int
        Number of templates fused per call
    algorithms : tuple of str, optional
        Algorithm names in fusion order
    dims : tuple of int, optional
        Declared dimensionality of each algorithm's template
    weights : tuple of float, optional
        Multiplier applied to each algorithm's block
    """

    k: int
    algorithms: Optional[Tuple[str, ...]] = None
    dims: Optional[Tuple[int, ...]] = None
    weights: Optional[Tuple[float, ...]] = None

    @property
    def fused_dim(self) -> Optional[int]:
        """Dimensionality of a fused template, if the layout is declared."""
        if self.dims is None:
            return None
        return int(sum(self.dims))


def check_model_directory(directory: PathLike) -> Path:
    """Return ``directory`` as a Path, raising ConfigError unless it exists."""
    try:
        directory = Path(directory)
    except TypeError as exc:
        raise ConfigError(f"Not a model directory path: {directory!r}") from exc
    if not directory.is_dir():
        raise ConfigError(f"Model directory not found: {directory}")
    return directory


def _read_rows(path: Path, required: bool = True) -> Optional[List[List[str]]]:
    """Read a whitespace table, skipping blank lines and # comments."""
    if not path.exists():
        if required:
            raise ConfigError(f"Missing model file: {path}")
        return None
    try:
        text = path.read_text()
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Cannot read model file {path}: {exc}") from exc

    rows = []
    for line in text.splitlines():
        line = line.split("#", 1)[0].strip()
        if line:
            rows.append(line.split())
    return rows


def _to_float(token: str, path: Path) -> float:
    try:
        value = float(token)
    except ValueError as exc:
        raise ParseError(f"{path.name}: {token!r} is not a number") from exc
    if not np.isfinite(value):
        raise ParseError(f"{path.name}: value {token!r} is not finite")
    return value


def read_score_model(
    directory: PathLike,
    layout: ModelLayout = DEFAULT_LAYOUT
) -> FusionModel:
    """
    Read the verification score calibration from a model directory.

    The per-algorithm z-norm table is required. If a linear fusion file is
    present its weights are attached to the model.

    Parameters
    ----------
    directory : str or Path
        Model directory
    layout : ModelLayout, optional
        File names to look up

    Returns
    -------
    FusionModel

    Raises
    ------
    ConfigError
        If the directory or the z-norm table is missing
    ParseError
        If a file is malformed
    """
    directory = check_model_directory(directory)
    path = layout.path(directory, "z_norm")
    rows = _read_rows(path)

    if not rows or tuple(rows[0]) != Z_NORM_HEADER:
        raise ParseError(
            f"{path.name}: expected header {' '.join(Z_NORM_HEADER)!r}"
        )
    if len(rows) < 2:
        raise ParseError(f"{path.name}: no algorithms listed")

    calibrations = []
    for row in rows[1:]:
        if len(row) != 3:
            raise ParseError(f"{path.name}: expected 3 columns, got {row}")
        name, position, scale = row
        try:
            calibrations.append(AlgorithmCalibration(
                name, _to_float(position, path), _to_float(scale, path)
            ))
        except ValueError as exc:
            raise ParseError(f"{path.name}: {exc}") from exc

    try:
        model = FusionModel(tuple(calibrations))
    except ValueError as exc:
        raise ParseError(f"{path.name}: {exc}") from exc

    weights = read_linear_weights(directory, model.algorithms, layout)
    if weights is not None:
        model = model.with_linear_weights(*weights)

    logger.info("Loaded score calibration from %s: %r", directory, model)
    return model


def read_linear_weights(
    directory: PathLike,
    algorithms: Sequence[str],
    layout: ModelLayout = DEFAULT_LAYOUT
) -> Optional[Tuple[Tuple[float, ...], float]]:
    """
    Read optional linear fusion weights, ordered like ``algorithms``.

    Returns
    -------
    tuple or None
        ``(weights, offset)`` or None if the file is absent
    """
    path = layout.path(directory, "linear_fusion")
    rows = _read_rows(path, required=False)
    if rows is None:
        return None

    offset = 0.0
    by_name: Dict[str, float] = {}
    for row in rows:
        if len(row) != 2:
            raise ParseError(f"{path.name}: expected 2 columns, got {row}")
        name, value = row
        if name == "offset":
            offset = _to_float(value, path)
        elif name in by_name:
            raise ParseError(f"{path.name}: duplicate weight for {name}")
        else:
            by_name[name] = _to_float(value, path)

    unknown = set(by_name) - set(algorithms)
    if unknown:
        raise ParseError(f"{path.name}: weights for unknown algorithms {sorted(unknown)}")
    missing = [name for name in algorithms if name not in by_name]
    if missing:
        raise ParseError(f"{path.name}: no weight for {missing}")

    return tuple(by_name[name] for name in algorithms), offset


def read_candidate_fusion_config(
    directory: PathLike,
    layout: ModelLayout = DEFAULT_LAYOUT
) -> Dict[str, Union[str, float, None]]:
    """
    Read candidate-list fusion settings.

    Returns
    -------
    dict
        ``{'combiner': str, 'missing_score': float or None}``; None means
        the combiner's neutral value. Defaults apply if the file is absent.
    """
    directory = check_model_directory(directory)
    path = layout.path(directory, "candidate_fusion")
    config: Dict[str, Union[str, float, None]] = {
        "combiner": DEFAULT_COMBINER,
        "missing_score": None,
    }
    rows = _read_rows(path, required=False)
    if rows is None:
        return config

    for row in rows:
        if len(row) != 2:
            raise ParseError(f"{path.name}: expected 'key value', got {row}")
        key, value = row
        if key == "combiner":
            config["combiner"] = value
        elif key == "missing_score":
            try:
                config["missing_score"] = float(value)
            except ValueError as exc:
                raise ParseError(f"{path.name}: {value!r} is not a number") from exc
        else:
            raise ParseError(f"{path.name}: unknown setting {key!r}")
    return config


def read_template_scheme(
    directory: PathLike,
    layout: ModelLayout = DEFAULT_LAYOUT
) -> TemplateScheme:
    """
    Read the template fusion scheme.

    Raises
    ------
    ConfigError
        If the directory or file is missing
    ParseError
        If K is not a positive integer or the layout rows are malformed
    """
    directory = check_model_directory(directory)
    path = layout.path(directory, "template_fusion")
    rows = _read_rows(path)
    if not rows or len(rows[0]) != 1:
        raise ParseError(f"{path.name}: first line must hold a single integer")

    try:
        k = int(rows[0][0])
    except ValueError as exc:
        raise ParseError(f"{path.name}: {rows[0][0]!r} is not an integer") from exc
    if k < 1:
        raise ParseError(f"{path.name}: expected template count must be >= 1, got {k}")

    layout_rows = rows[1:]
    if not layout_rows:
        return TemplateScheme(k)
    if len(layout_rows) != k:
        raise ParseError(
            f"{path.name}: layout lists {len(layout_rows)} algorithms, expected {k}"
        )

    names, dims, weights = [], [], []
    for row in layout_rows:
        if len(row) not in (2, 3):
            raise ParseError(f"{path.name}: expected 'Algorithm dimension [weight]', got {row}")
        names.append(row[0])
        try:
            dim = int(row[1])
        except ValueError as exc:
            raise ParseError(f"{path.name}: {row[1]!r} is not an integer") from exc
        if dim < 1:
            raise ParseError(f"{path.name}: dimension must be >= 1, got {dim}")
        dims.append(dim)
        weights.append(_to_float(row[2], path) if len(row) == 3 else 1.0)

    try:
        validate_algorithm_names(names)
    except ValueError as exc:
        raise ParseError(f"{path.name}: {exc}") from exc

    return TemplateScheme(k, tuple(names), tuple(dims), tuple(weights))


def read_comparator_name(
    directory: PathLike,
    layout: ModelLayout = DEFAULT_LAYOUT
) -> str:
    """Read the comparator name, defaulting to L1 if the file is absent."""
    directory = check_model_directory(directory)
    path = layout.path(directory, "template_comparator")
    rows = _read_rows(path, required=False)
    if rows is None:
        return DEFAULT_COMPARATOR
    if len(rows) != 1 or len(rows[0]) != 1:
        raise ParseError(f"{path.name}: expected a single comparator name")
    return rows[0][0].lower()


def write_score_model(
    model: FusionModel,
    directory: PathLike,
    layout: ModelLayout = DEFAULT_LAYOUT
) -> Path:
    """
    Write a FusionModel as a z-norm table (and linear weights if present).

    Parameters
    ----------
    model : FusionModel
        Model to write
    directory : str or Path
        Output directory, created if needed

    Returns
    -------
    Path
        Path of the z-norm table
    """
    if not isinstance(model, FusionModel):
        raise TypeError(f"Expected FusionModel, got {type(model)}")
    validate_algorithm_names(model.algorithms)

    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)

    lines = [" ".join(Z_NORM_HEADER)]
    lines += [
        f"{c.algorithm} {c.position!r} {c.scale!r}" for c in model.calibrations
    ]
    path = layout.path(directory, "z_norm")
    path.write_text("\n".join(lines) + "\n")

    weights_path = layout.path(directory, "linear_fusion")
    if model.is_weighted:
        lines = [f"{name} {w!r}" for name, w in zip(model.algorithms, model.weights)]
        lines.append(f"offset {model.offset!r}")
        weights_path.write_text("\n".join(lines) + "\n")
    elif weights_path.exists():
        weights_path.unlink()

    logger.info("Wrote score calibration for %d algorithms to %s", model.k, directory)
    return path


def write_candidate_fusion_config(
    directory: PathLike,
    combiner: str = DEFAULT_COMBINER,
    missing_score: Optional[float] = None,
    layout: ModelLayout = DEFAULT_LAYOUT
) -> Path:
    """Write candidate-list fusion settings."""
    if not combiner or any(ch.isspace() for ch in combiner):
        raise ValueError(f"Invalid combiner name: {combiner!r}")
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)

    lines = [f"combiner {combiner}"]
    if missing_score is not None:
        lines.append(f"missing_score {float(missing_score)!r}")
    path = layout.path(directory, "candidate_fusion")
    path.write_text("\n".join(lines) + "\n")
    return path


def write_template_model(
    directory: PathLike,
    k: int,
    algorithms: Optional[Sequence[str]] = None,
    dims: Optional[Sequence[int]] = None,
    weights: Optional[Sequence[float]] = None,
    comparator: str = DEFAULT_COMPARATOR,
    layout: ModelLayout = DEFAULT_LAYOUT
) -> Path:
    """
    Write a template fusion scheme and comparator choice.

    Parameters
    ----------
    directory : str or Path
        Output directory, created if needed
    k : int
        Number of templates fused per call
    algorithms, dims : sequence, optional
        Per-algorithm layout; must be given together, each of length k
    weights : sequence of float, optional
        Per-algorithm block weights (requires a layout)
    comparator : str, optional
        Comparator used by verify and search (default: 'l1')
    """
    if int(k) != k or k < 1:
        raise ValueError(f"k must be a positive integer, got {k}")
    if (algorithms is None) != (dims is None):
        raise ValueError("algorithms and dims must be given together")
    if weights is not None and algorithms is None:
        raise ValueError("weights require algorithms and dims")

    lines = [str(int(k))]
    if algorithms is not None:
        names = validate_algorithm_names(algorithms)
        dims = [int(d) for d in dims]
        if len(names) != k or len(dims) != k:
            raise ValueError(f"Layout must list exactly {k} algorithms")
        if any(d < 1 for d in dims):
            raise ValueError("Dimensions must be >= 1")
        if weights is None:
            weights = [1.0] * k
        if len(weights) != k:
            raise ValueError(f"Expected {k} weights, got {len(weights)}")
        lines += [
            f"{name} {dim} {float(w)!r}" for name, dim, w in zip(names, dims, weights)
        ]

    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    path = layout.path(directory, "template_fusion")
    path.write_text("\n".join(lines) + "\n")
    layout.path(directory, "template_comparator").write_text(f"{comparator}\n")
    logger.info("Wrote template fusion scheme (K=%d) to %s", k, directory)
    return path
