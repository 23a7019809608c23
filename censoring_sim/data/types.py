"""Core enumerations for the censoring simulation."""

from enum import Enum, auto


class CensoringPolicy(Enum):
    """Censoring mechanism applied to a cohort."""

    ADMINISTRATIVE = auto()  # End of follow-up only
    RANDOM = auto()  # Uniform, independent of time and group
    INFORMATIVE = auto()  # Group-targeted, among horizon survivors


class SimulationStage(Enum):
    """Stage of the three-step demonstration."""

    BASELINE = auto()
    RANDOM_CENSORING = auto()
    INFORMATIVE_CENSORING = auto()

    @property
    def policy(self) -> CensoringPolicy:
        """Censoring policy most recently applied at this stage."""
        return _STAGE_POLICY[self]

    @property
    def title(self) -> str:
        """Human-readable stage title used in plots and tables."""
        return _STAGE_TITLES[self]


_STAGE_POLICY = {
    SimulationStage.BASELINE: CensoringPolicy.ADMINISTRATIVE,
    SimulationStage.RANDOM_CENSORING: CensoringPolicy.RANDOM,
    SimulationStage.INFORMATIVE_CENSORING: CensoringPolicy.INFORMATIVE,
}

_STAGE_TITLES = {
    SimulationStage.BASELINE: "Administrative censoring only",
    SimulationStage.RANDOM_CENSORING: "Random (non-informative) censoring",
    SimulationStage.INFORMATIVE_CENSORING: "Informative censoring",
}
