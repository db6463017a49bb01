from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from .aligner import align_residues, count_unconsumed
from .chain_extractor import extract_chain
from .config import FeaturizerConfig
from .deposit import load_deposit
from .feature_rows import FeatureRowBuilder
from .hbonds import BackboneHBondMap
from .input_resolver import ChainTask
from .logging_utils import LOGGER_NAME, timeit
from .progress import StageProgress
from .residues import ResidueId
from .secondary_structure import compute_secondary_structure
from .writer import FeatureFileWriter, output_name


@dataclass
class TaskFailure:
    task: ChainTask
    reason: str


@dataclass
class TaskResult:
    task: ChainTask
    output_path: Path
    rows_written: int
    rows_omitted: int


@dataclass
class RunSummary:
    processed: int = 0
    written: List[TaskResult] = field(default_factory=list)
    skipped: List[ChainTask] = field(default_factory=list)
    failures: List[TaskFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


class Featurizer:
    """Process chain tasks one after another; a failing task never stops the batch."""

    def __init__(self, config: FeaturizerConfig, logger: Optional[logging.Logger] = None):
        self.config = config
        self.logger = logger or logging.getLogger(LOGGER_NAME)

    def output_path(self, task: ChainTask) -> Path:
        return self.config.output.directory / output_name(
            task.structure_path, task.chain_id or "", self.config.output.suffix
        )

    def process_task(self, task: ChainTask) -> TaskResult:
        cfg = self.config
        chain_id = task.chain_id or ""
        deposit = load_deposit(task.structure_path)
        chain = extract_chain(deposit.structure, chain_id)
        entity = deposit.chain_monomers(chain_id)
        hbonds = BackboneHBondMap.from_chain(chain, cfg.hbond) if cfg.features.hbonds else BackboneHBondMap()
        ss = None
        if cfg.features.secondary_structure:
            ss = compute_secondary_structure(
                deposit.structure, task.structure_path, chain_id, cfg.dssp.executable, self.logger
            )
        observed = chain.residue_ids()
        self.logger.debug(
            "%s: %d entity residues, %d observed, %d H-bonds",
            task.describe(),
            len(entity),
            len(observed),
            len(hbonds),
        )

        out_path = self.output_path(task)
        omitted = 0
        with FeatureFileWriter(out_path, cfg.format_version, self.logger) as writer:
            # partner indices need the whole alignment before the first row is built
            aligned = list(align_residues(entity, observed))
            entity_index_of: Dict[ResidueId, int] = {
                item.residue_id: item.entity_index for item in aligned if item.residue_id is not None
            }
            builder = FeatureRowBuilder(
                chain,
                ss,
                hbonds,
                entity_index_of,
                anchor_atom=cfg.features.anchor_atom,
                emit_secondary_structure=cfg.features.secondary_structure,
                logger=self.logger,
            )
            for item in aligned:
                row = builder.build(item)
                if row is None:
                    omitted += 1
                    continue
                writer.write_row(row)
            rows_written = writer.rows_written

        leftover = count_unconsumed(entity, observed)
        if leftover:
            self.logger.warning(
                "%s: %d observed residues have no entity counterpart and were ignored", task.describe(), leftover
            )
        self.logger.info("Wrote %s (%d rows)", out_path, rows_written)
        return TaskResult(task=task, output_path=out_path, rows_written=rows_written, rows_omitted=omitted)

    @timeit("featurization")
    def run(self, tasks: Iterable[ChainTask]) -> RunSummary:
        task_list = list(tasks)
        summary = RunSummary()
        progress = StageProgress("featurizer", len(task_list), self.logger)
        for task in task_list:
            try:
                if not task.has_chain:
                    self.logger.warning("No chain selected for %s; skipping", task.structure_path)
                    summary.skipped.append(task)
                    continue
                summary.processed += 1
                try:
                    summary.written.append(self.process_task(task))
                except Exception as exc:  # per-task isolation
                    reason = str(exc) or exc.__class__.__name__
                    self.logger.error(
                        "Failed to process %s chain %s: %s", task.structure_path.name, task.chain_id, reason
                    )
                    summary.failures.append(TaskFailure(task=task, reason=reason))
            finally:
                progress.increment()

        self.logger.info(
            "Featurization complete: %d written, %d failed, %d skipped",
            len(summary.written),
            len(summary.failures),
            len(summary.skipped),
        )
        return summary
