"""
pybiofusion command-line interface.

Main entry point for the ``biofusion`` command-line tool.

Commands:
    train   Train a score-level model directory from a cohort table
    fuse    Fuse per-algorithm verification scores with a model directory
    det     Compute DET operating points from scores and genuine labels
"""

import argparse
import logging
import sys

import numpy as np

from . import __version__
from .calibration import fit_linear_model, train_cohort_znorm
from .config import DEFAULT_FMR_TARGETS, DEFAULT_LAYOUT
from .evaluation import compute_det, format_det_table
from .fusion import ScoreFuser
from .io import save_model_hdf5, write_score_model

logger = logging.getLogger("pybiofusion")


def _read_cohort(path):
    """
    Read a cohort table.

    The first line is a header ``ID1 ID2 <algorithm> ...``; each following
    line holds two subject identities and one score per algorithm.
    """
    table = np.loadtxt(path, dtype=str, comments="#", ndmin=2)
    if table.shape[0] < 2 or table.shape[1] < 3:
        raise ValueError(
            f"{path}: expected a header 'ID1 ID2 <algorithm> ...' and at least one row"
        )
    header, rows = table[0], table[1:]
    algorithms = list(header[2:])
    try:
        scores = rows[:, 2:].astype(float).T
    except ValueError as exc:
        raise ValueError(f"{path}: scores must be numeric") from exc
    return algorithms, rows[:, 0], rows[:, 1], scores


def cmd_train(args) -> int:
    algorithms, ids1, ids2, scores = _read_cohort(args.cohort)
    model = train_cohort_znorm(scores, ids1, ids2, algorithms)
    if args.linear:
        model = fit_linear_model(model, scores, ids1 == ids2, prior=args.prior)

    write_score_model(model, args.model_dir)
    if args.hdf5:
        save_model_hdf5(model, DEFAULT_LAYOUT.path(args.model_dir, "hdf5_model"))

    for cal in model.calibrations:
        print(f"{cal.algorithm:<24} position={cal.position:.6g} scale={cal.scale:.6g}")
    return 0


def cmd_fuse(args) -> int:
    fuser = ScoreFuser()
    status = fuser.initialize(args.model_dir, ScoreFuser.Type.VERIFICATION)
    if not status.ok:
        logger.error("Cannot load %s: %s", args.model_dir, status)
        return 1

    rows = np.loadtxt(args.scores, dtype=float, comments="#", ndmin=2)
    fused = np.empty(rows.shape[0])
    for i, row in enumerate(rows):
        status, value = fuser.fuse_verification_scores(row)
        if not status.ok:
            logger.error("Row %d: %s", i + 1, status)
            return 1
        fused[i] = value

    if args.output:
        np.savetxt(args.output, fused, fmt="%.10g")
        logger.info("Wrote %d fused scores to %s", fused.shape[0], args.output)
    else:
        for value in fused:
            print(f"{value:.10g}")
    return 0


def cmd_det(args) -> int:
    table = np.loadtxt(args.scores, dtype=float, comments="#", ndmin=2)
    if table.shape[1] != 2:
        raise ValueError(f"{args.scores}: expected two columns 'score genuine'")
    points = compute_det(table[:, 0], table[:, 1] != 0, args.fmr)
    print(format_det_table(points, title=args.title))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="biofusion",
        description="Fusion of biometric recognition algorithms"
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: WARNING)"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    train = subparsers.add_parser(
        "train", help="Train a z-norm model directory from a cohort table"
    )
    train.add_argument("cohort", help="Table with header 'ID1 ID2 <algorithm> ...'")
    train.add_argument("model_dir", help="Output model directory")
    train.add_argument(
        "--linear", action="store_true",
        help="Also train linear fusion weights on genuine/impostor labels"
    )
    train.add_argument(
        "--prior", type=float, default=0.5,
        help="Genuine prior for linear fusion training (default: 0.5)"
    )
    train.add_argument(
        "--hdf5", action="store_true",
        help="Also save the model as fusion_model.h5 (requires h5py)"
    )
    train.set_defaults(func=cmd_train)

    fuse = subparsers.add_parser(
        "fuse", help="Fuse verification scores, one comparison per row"
    )
    fuse.add_argument("model_dir", help="Model directory")
    fuse.add_argument("scores", help="Table with one column per algorithm")
    fuse.add_argument("-o", "--output", help="Write fused scores to this file")
    fuse.set_defaults(func=cmd_fuse)

    det = subparsers.add_parser(
        "det", help="DET operating points from 'score genuine' rows"
    )
    det.add_argument("scores", help="Two columns: score and genuine flag (0/1)")
    det.add_argument(
        "--fmr", type=float, nargs="+", default=list(DEFAULT_FMR_TARGETS),
        help="False match rates of interest (default: 0.001 0.01 0.1)"
    )
    det.add_argument("--title", help="Title printed above the table")
    det.set_defaults(func=cmd_det)

    return parser


def main(argv=None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(name)s %(levelname)s: %(message)s"
    )

    try:
        return args.func(args)
    except (ImportError, OSError, ValueError) as exc:
        logger.error("%s", exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
