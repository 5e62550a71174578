"""Runs every standard experiment and prints the summaries as tables."""

from rich import print
from rich.table import Table

from qtrials import AggregateSummary, CountingBackend, Family, Outcome, run_many, summarize
from qtrials.catalog import standard_configs
from qtrials.config import Settings
from qtrials.log import setup_logging


def bell_table(summaries: list[AggregateSummary]) -> Table:
    table = Table(title="Bell states", show_header=True)
    table.add_column("Expected state", justify="left")
    table.add_column("Q1 zeros", justify="right")
    table.add_column("Q1 ones", justify="right")
    table.add_column("Q2 same as Q1", justify="right")

    for summary in summaries:
        q1 = summary.counts_for(0)
        table.add_row(summary.label, str(q1[Outcome.ZERO]), str(q1[Outcome.ONE]), str(summary.agreement))
    return table


def oracle_table(summaries: list[AggregateSummary]) -> Table:
    table = Table(title="Deutsch / Deutsch-Jozsa", show_header=True)
    table.add_column("Circuit", justify="left")
    table.add_column("Oracle", justify="left")
    table.add_column("Input qubits", justify="right")
    table.add_column("Result", justify="left")

    for summary in summaries:
        table.add_row(summary.circuit, summary.label, str(summary.n_input_qubits), str(summary.verdict))
    return table


def teleportation_table(summaries: list[AggregateSummary]) -> Table:
    table = Table(title="Teleportation", show_header=True)
    table.add_column("State sent", justify="left")
    table.add_column("Received intact", justify="right")

    for summary in summaries:
        table.add_row(summary.label, f"{summary.agreement}/{summary.shots}")
    return table


def main() -> None:
    settings = Settings.from_env()
    setup_logging(settings.log_level, settings.log_json)

    bell = run_many(standard_configs(Family.ENTANGLEMENT, settings.shots), settings.create_backend)
    oracles = run_many(standard_configs(Family.CLASSIFICATION, 1), settings.create_backend)
    teleport = run_many(standard_configs(Family.TELEPORTATION, settings.shots), settings.create_backend)

    print(bell_table(bell))
    print(oracle_table(oracles))
    print(teleportation_table(teleport))

    # Width counter, as the trace simulator reported it
    traced = CountingBackend(settings.create_backend())
    for config in standard_configs(Family.ENTANGLEMENT, 1):
        _ = summarize(config, traced)
    print(f"Bell circuits: {traced.metrics()}")


if __name__ == "__main__":
    main()
