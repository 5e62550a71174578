from qtrials.types import (
    AggregateSummary,
    Basis,
    ExperimentConfig,
    Family,
    Oracle,
    Outcome,
    TrialResult,
    Verdict,
)
from qtrials.errors import BackendFailure, InsufficientData, InvalidConfiguration, MalformedInput, QTrialsError
from qtrials.backend import Backend, CountingBackend, StateVectorBackend
from qtrials.executor import run_trial
from qtrials.aggregate import (
    AgreementRule,
    AggregationRule,
    ClassificationRule,
    CountingRule,
    FidelityRule,
    aggregate,
    rule_for,
)
from qtrials.runner import run_experiment, run_many, summarize

__version__ = "0.1.0"
__all__ = [
    "AggregateSummary", "Basis", "ExperimentConfig", "Family", "Oracle", "Outcome", "TrialResult", "Verdict",
    "QTrialsError", "InvalidConfiguration", "BackendFailure", "InsufficientData", "MalformedInput",
    "Backend", "StateVectorBackend", "CountingBackend",
    "run_trial", "run_experiment", "summarize", "run_many",
    "AggregationRule", "CountingRule", "AgreementRule", "FidelityRule", "ClassificationRule", "aggregate", "rule_for",
]
