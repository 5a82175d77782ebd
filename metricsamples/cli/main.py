# Copyright The Volcano Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Main CLI entry point for metricsamples.

This module defines the command-line interface using Typer. ``run`` samples
every version listed in the versions file and prints a summary table.
"""

import logging
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from metricsamples.config import SamplerConfig, get_versions
from metricsamples.exceptions import SamplerError
from metricsamples.models import HarnessReport
from metricsamples.runtime.harness import OrchestrationHarness
from metricsamples.services.docker_service import DockerService, remediation_command
from metricsamples.services.telemetry_client import TelemetryClient
from metricsamples.utils.log import configure_logging

console = Console()

app = typer.Typer(
    name="metricsamples",
    help="Run each Logstash version in a throwaway container and collect node stats and node info",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


def version_callback(value: bool) -> None:
    """Show version information and exit."""
    if value:
        from metricsamples import __version__
        console.print(f"metricsamples version: [bold green]{__version__}[/bold green]")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """metricsamples - collect runtime telemetry from versioned sandboxes."""


@app.command()
def run(
    versions_file: Optional[str] = typer.Option(
        None,
        "-f",
        "--versions-file",
        help="File listing one version per line",
    ),
    output_dir: Optional[str] = typer.Option(
        None,
        "-o",
        "--output-dir",
        help="Root directory for harvested telemetry",
    ),
    registry: Optional[str] = typer.Option(
        None,
        "--registry",
        help="Image repository combined with each version",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Per-version deadline in seconds",
    ),
    teardown_timeout: Optional[float] = typer.Option(
        None,
        "--teardown-timeout",
        help="Container teardown deadline in seconds",
    ),
    poll_interval: Optional[float] = typer.Option(
        None,
        "--poll-interval",
        help="Seconds between readiness probes",
    ),
    port_start: Optional[int] = typer.Option(
        None,
        "--port-start",
        help="First host port to publish on (inclusive)",
    ),
    port_end: Optional[int] = typer.Option(
        None,
        "--port-end",
        help="Last host port to publish on (exclusive)",
    ),
    log_file: Optional[str] = typer.Option(
        None,
        "--log-file",
        help="Also write logs to this file",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Enable detailed logging",
    ),
) -> None:
    """
    Sample every version concurrently.

    Each version gets its own container, port and deadline. The command
    returns once every container has been torn down; individual version
    failures are reported but do not change the exit code.
    """
    configure_logging(logging.DEBUG if verbose else logging.INFO, log_file)

    options = {
        "versions_file": versions_file,
        "output_dir": output_dir,
        "registry": registry,
        "lifecycle_timeout": timeout,
        "teardown_timeout": teardown_timeout,
        "poll_interval": poll_interval,
        "port_range_start": port_start,
        "port_range_end": port_end,
    }

    try:
        config = SamplerConfig.from_env(options)
        version_list = get_versions(config.versions_file)
        runtime = DockerService(verbose=verbose)
    except SamplerError as e:
        console.print(f"❌ Error preparing run: [red]{escape(str(e))}[/red]")
        raise typer.Exit(1)

    telemetry = TelemetryClient(timeout=config.request_timeout, pool_maxsize=max(10, len(version_list)))
    harness = OrchestrationHarness(config, runtime, telemetry)

    try:
        report = harness.run(version_list)
    except KeyboardInterrupt:
        console.print("⚠️  Interrupted; all containers have been torn down")
        raise typer.Exit(130)
    finally:
        telemetry.close()

    _print_report(report)


@app.command()
def versions(
    versions_file: Optional[str] = typer.Option(
        None,
        "-f",
        "--versions-file",
        help="File listing one version per line",
    ),
) -> None:
    """Show the versions that ``run`` would sample."""
    try:
        config = SamplerConfig.from_env({"versions_file": versions_file})
        parsed = get_versions(config.versions_file)
    except SamplerError as e:
        console.print(f"❌ Error reading versions: [red]{escape(str(e))}[/red]")
        raise typer.Exit(1)

    for version in parsed:
        console.print(version)


def _print_report(report: HarnessReport) -> None:
    if not report.outcomes:
        console.print("No versions to sample")
        return

    table = Table(title="Sampling Summary")
    table.add_column("Version", style="cyan")
    table.add_column("State")
    table.add_column("Port")
    table.add_column("Failed Stage")
    table.add_column("Error", style="red")
    table.add_column("Teardown")

    for outcome in report.outcomes:
        state_style = "green" if outcome.succeeded else "red"
        if not outcome.teardown_attempted:
            teardown = "-"
        elif outcome.teardown_succeeded:
            teardown = "ok"
        else:
            teardown = "[red]failed[/red]"

        table.add_row(
            outcome.version,
            f"[{state_style}]{outcome.state.value}[/{state_style}]",
            str(outcome.port) if outcome.port is not None else "-",
            outcome.failed_stage.value if outcome.failed_stage else "-",
            escape(outcome.error or ""),
            teardown,
        )

    console.print(table)

    for outcome in report.outcomes:
        if outcome.teardown_attempted and not outcome.teardown_succeeded:
            console.print(
                f"🧹 To remove the {outcome.version} container manually, run: "
                f"[bold]{remediation_command(outcome.container_id)}[/bold]"
            )

    console.print(f"✅ {len(report.succeeded)} succeeded, ❌ {len(report.failed)} failed")


if __name__ == "__main__":
    app()
