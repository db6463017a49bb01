#!/usr/bin/env python3
"""
Feature tables for training deep-bbq backbone models.

Every selected chain of a PDB or mmCIF deposit becomes one ``<name>_<chain>.dat``
file with one line per residue of the chain's designed sequence: unobserved
residues are written as gap lines, observed ones carry the CA position, the
DSSP secondary structure and the backbone hydrogen bonds of the residue.

Examples
--------
    deepbbq-featurizer -i 2gb1.cif -c A
    deepbbq-featurizer -l chains.txt -p /data/mmCIF -o features/ --log-dir logs/
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import yaml

if __package__ is None or __package__ == "":
    # Allow execution via ``python featurizer.py`` by injecting the repo root.
    _REPO_ROOT = Path(__file__).resolve().parents[2]
    if str(_REPO_ROOT) not in sys.path:
        sys.path.insert(0, str(_REPO_ROOT))

    from deepbbq.featurizer.featurizer_info import build_run_info, version_string, write_run_info
    from deepbbq.featurizer.lib.config import FeaturizerConfig, load_config
    from deepbbq.featurizer.lib.errors import InputError
    from deepbbq.featurizer.lib.input_resolver import ChainTask, resolve_list_file, single_task
    from deepbbq.featurizer.lib.logging_utils import prepare_run_directory, setup_logger
    from deepbbq.featurizer.lib.pdb_utils import configure_pdb_parser
    from deepbbq.featurizer.lib.pipeline import Featurizer
    from deepbbq.featurizer.lib.secondary_structure import dssp_available
else:
    from .featurizer_info import build_run_info, version_string, write_run_info
    from .lib.config import FeaturizerConfig, load_config
    from .lib.errors import InputError
    from .lib.input_resolver import ChainTask, resolve_list_file, single_task
    from .lib.logging_utils import prepare_run_directory, setup_logger
    from .lib.pdb_utils import configure_pdb_parser
    from .lib.pipeline import Featurizer
    from .lib.secondary_structure import dssp_available

EXIT_OK = 0
EXIT_FAILURES = 1
EXIT_USAGE = 2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="deepbbq-featurizer",
        description="Create per-residue feature tables for training the deep-bbq model.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-i", "--input_file", type=str, help="A single CIF or PDB file to process.")
    parser.add_argument("-c", "--select_chain", type=str, help="Chain to process from the file given with -i.")
    parser.add_argument(
        "-l",
        "--list_file",
        type=str,
        help="File with a list of PDB IDs with chains (e.g. 2gb1A); takes precedence over -i.",
    )
    parser.add_argument(
        "-p",
        "--path",
        type=str,
        default=".",
        help="Folder searched for the structure files named in the list file (default: current directory).",
    )
    parser.add_argument("-o", "--output-dir", type=str, help="Where .dat files are written (default: from config, '.').")
    parser.add_argument("--config", type=str, help="Optional YAML configuration file.")
    parser.add_argument("--log-dir", type=str, help="Directory for per-run log files and run_info.json.")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        default="INFO",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        help="Console/file log level (default: INFO).",
    )
    parser.add_argument("--dssp", type=str, help="mkdssp executable (default: from config, 'mkdssp').")
    parser.add_argument(
        "--no-secondary-structure",
        action="store_true",
        help="Do not run DSSP; write output format version 1 without the secondary-structure column.",
    )
    parser.add_argument(
        "--pdb-warnings",
        action="store_true",
        help="Show Bio.PDB construction warnings while parsing structures.",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with status 1 when any chain failed.",
    )
    parser.add_argument("--version", action="store_true", help="Print the featurizer version and exit.")
    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    return _build_parser().parse_args(list(argv) if argv is not None else sys.argv[1:])


def _usage_error(args: argparse.Namespace) -> Optional[str]:
    if not args.input_file and not args.list_file:
        return "one of --input_file (-i) or --list_file (-l) is required"
    return None


def _resolve_config(args: argparse.Namespace) -> FeaturizerConfig:
    config = load_config(Path(args.config).expanduser() if args.config else None)
    if args.output_dir:
        config.output.directory = Path(args.output_dir)
    if args.dssp:
        config.dssp.executable = args.dssp
    if args.no_secondary_structure:
        config.features.secondary_structure = False
    if args.pdb_warnings:
        config.parser.pdb_warnings = True
    return config


def _collect_tasks(args: argparse.Namespace, logger: logging.Logger) -> List[ChainTask]:
    if args.list_file:
        if args.input_file:
            logger.warning("Both --list_file and --input_file given; using %s", args.list_file)
        return resolve_list_file(Path(args.list_file), Path(args.path), logger)
    return [single_task(Path(args.input_file), args.select_chain)]


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    if args.version:
        print(version_string())
        return EXIT_OK
    problem = _usage_error(args)
    if problem:
        _build_parser().print_usage(sys.stderr)
        print(f"Error: {problem}", file=sys.stderr)
        return EXIT_USAGE

    run_dir = prepare_run_directory(Path(args.log_dir).resolve()).run_dir if args.log_dir else None
    logger = setup_logger(run_dir, level=args.log_level)

    try:
        config = _resolve_config(args)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        message = f"Configuration invalid: {exc}"
        logger.error(message)
        print(f"Error: {message}", file=sys.stderr)
        return EXIT_USAGE
    configure_pdb_parser(config.parser.pdb_warnings)

    if config.features.secondary_structure and not dssp_available(config.dssp.executable):
        logger.error(
            "DSSP executable '%s' not found; install mkdssp, pass --dssp, or use --no-secondary-structure",
            config.dssp.executable,
        )
        return EXIT_USAGE

    try:
        tasks = _collect_tasks(args, logger)
    except InputError as exc:
        logger.error("%s", exc)
        return EXIT_USAGE

    if run_dir is not None:
        logger.info("Prepared log directory: %s", run_dir)
    logger.info("Output directory: %s (format v%d)", config.output.directory, config.format_version)

    summary = Featurizer(config, logger).run(tasks)

    if run_dir is not None:
        run_info = build_run_info(
            config=config,
            config_path=Path(args.config) if args.config else None,
            task_count=len(tasks),
            options={
                "written": [str(result.output_path) for result in summary.written],
                "failed": [
                    {"file": str(failure.task.structure_path), "chain": failure.task.chain_id, "reason": failure.reason}
                    for failure in summary.failures
                ],
                "skipped": [str(task.structure_path) for task in summary.skipped],
            },
        )
        write_run_info(run_dir, run_info)

    if args.strict and not summary.ok:
        return EXIT_FAILURES
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
