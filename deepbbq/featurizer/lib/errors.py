"""Exception types raised by the featurizer pipeline.

Everything below ``FeaturizerError`` except ``InputError`` is a per-file
failure: the orchestrator logs it and moves on to the next chain.
"""
from __future__ import annotations


class FeaturizerError(Exception):
    """Base class for featurizer failures."""


class InputError(FeaturizerError):
    """Unreadable list file or otherwise unusable command-line input."""


class NoSuchChain(FeaturizerError):
    def __init__(self, chain_id: str):
        super().__init__(f"No atoms found for chain '{chain_id}'")
        self.chain_id = chain_id


class EntityError(FeaturizerError):
    """The designed sequence of a chain could not be determined."""


class ResidueNotDefined(FeaturizerError):
    def __init__(self, entity_index: int):
        super().__init__(
            f"Entity residue {entity_index} has no observed counterpart (observed residue list exhausted)"
        )
        self.entity_index = entity_index


class SecondaryStructureNotDefined(FeaturizerError):
    def __init__(self, residue_id: object):
        super().__init__(f"No secondary structure assigned to residue {residue_id}")
        self.residue_id = residue_id


class DsspError(FeaturizerError):
    """mkdssp failed or produced nothing usable."""
