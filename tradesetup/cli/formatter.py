"""
Output formatting for different display modes.
"""
import csv
import io
import json
from typing import Any, Dict, List

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

console = Console()

CSV_COLUMNS = [
    "Symbol", "Action", "Priority", "Entry", "Stop", "Target2",
    "RiskReward", "PositionSize", "RiskLevel", "Grade", "Timestamp",
]


class OutputFormatter:
    """Format evaluation results for display."""

    @staticmethod
    def _color_code_action(action: str) -> str:
        """Apply color coding to actions based on direction."""
        if action == "STRONG BUY":
            return "[bold green]STRONG BUY[/bold green]"
        elif action == "BUY":
            return "[green]BUY[/green]"
        elif action == "STRONG SELL":
            return "[bold red]STRONG SELL[/bold red]"
        elif action == "SELL":
            return "[red]SELL[/red]"
        elif action == "HOLD":
            return "[yellow]HOLD[/yellow]"
        else:
            return f"[dim]{action}[/dim]"

    @staticmethod
    def _color_code_grade(grade: str) -> str:
        colors = {"A": "green", "B": "cyan", "C": "yellow", "D": "red"}
        color = colors.get(grade, "dim")
        return f"[{color}]{grade}[/{color}]"

    @staticmethod
    def format_table(results: List[Dict[str, Any]]) -> None:
        """
        Format results as a rich table with colors.

        Args:
            results: List of result dictionaries
        """
        if not results:
            console.print("[yellow]No results to display[/yellow]")
            return

        if len(results) == 1:
            OutputFormatter._format_single_detailed(results[0])
            return

        table = Table(title="Trade Signals", show_header=True, header_style="bold magenta")
        table.add_column("Symbol", style="cyan", no_wrap=True)
        table.add_column("Action", no_wrap=True)
        table.add_column("Entry", justify="right")
        table.add_column("Stop", justify="right")
        table.add_column("R:R", justify="right")
        table.add_column("Size %", justify="right")
        table.add_column("Risk", no_wrap=True)
        table.add_column("Grade", justify="center")
        table.add_column("Summary", style="dim")

        for result in results:
            if "error" in result:
                table.add_row(
                    result["symbol"],
                    "[red]ERROR[/red]",
                    "-", "-", "-", "-", "-", "-",
                    result["error"][:50] + "..." if len(result["error"]) > 50 else result["error"],
                )
                continue

            setup = result.get("setup") or {}
            risk = result.get("riskManagement") or {}
            compliance = result.get("compliance") or {}
            entry = setup.get("entry", {}).get("price")
            stop = setup.get("stopLoss", {}).get("price")
            reasoning = setup.get("message") or result["reasoning"]

            table.add_row(
                result["symbol"],
                OutputFormatter._color_code_action(result["action"]),
                f"{entry:.2f}" if entry is not None else "-",
                f"{stop:.2f}" if stop is not None else "-",
                setup.get("riskReward", "-"),
                f"{risk.get('positionSize', {}).get('percentage', 0):.1f}",
                risk.get("riskLevel", "-"),
                OutputFormatter._color_code_grade(compliance.get("grade", "D")),
                reasoning[:50] + "..." if len(reasoning) > 50 else reasoning,
            )

        console.print(table)

    @staticmethod
    def _format_single_detailed(result: Dict[str, Any]) -> None:
        """Format single result with detailed information."""
        if "error" in result:
            console.print(
                Panel(
                    f"[red]Error evaluating {result['symbol']}:[/red]\n{result['error']}",
                    title="[X] Evaluation Error",
                    border_style="red",
                )
            )
            return

        action = result["action"]
        if "BUY" in action:
            border_style = "green"
        elif "SELL" in action:
            border_style = "red"
        else:
            border_style = "yellow"

        setup = result.get("setup") or {}
        risk = result.get("riskManagement") or {}
        compliance = result.get("compliance") or {}

        renderables: List[Any] = []
        content = (
            f"[bold]Action:[/bold] {OutputFormatter._color_code_action(action)}    "
            f"[bold]Priority:[/bold] {result['priority']}    "
            f"[bold]Urgency:[/bold] {result['urgency']}\n\n"
            f"[bold]Reasoning:[/bold]\n{result['reasoning']}\n"
        )

        if "targets" in setup:
            ladder = Table(show_header=True, box=None, padding=(0, 1))
            ladder.add_column("Level", style="cyan")
            ladder.add_column("Price", justify="right")
            ladder.add_column("Move %", justify="right")
            ladder.add_column("Prob %", justify="right")
            ladder.add_column("Exit")

            ladder.add_row("Entry", f"{setup['entry']['price']:.2f}", "-", "-", "-")
            ladder.add_row(
                "Stop",
                f"{setup['stopLoss']['price']:.2f}",
                f"{setup['stopLoss']['percentage']:.2f}",
                "-",
                f"{setup['stopLoss']['atrMultiple']}x ATR",
            )
            for target in setup["targets"]:
                ladder.add_row(
                    f"T{target['level']}",
                    f"{target['price']:.2f}",
                    f"{target['percentage']:.2f}",
                    f"{target['probability']:.0f}",
                    target.get("exitStrategy") or "-",
                )

            content += (
                f"\n[bold]Risk/Reward:[/bold] {setup['riskReward']}    "
                f"[bold]Timeframe:[/bold] {setup['timeframe']}    "
                f"[bold]Timing:[/bold] {setup['marketTiming']['status']} ({setup['marketTiming']['window']})\n"
            )

            renderables.append(Text.from_markup(content))
            renderables.append(ladder)
            content = ""
        elif setup.get("message"):
            content += f"\n[dim]{setup['message']}[/dim]\n"

        if risk:
            position = risk["positionSize"]
            content += (
                f"\n[bold]Position:[/bold] {position['percentage']:.1f}% "
                f"(max risk {position['maxDollarRisk']['formatted']})    "
                f"[bold]Risk:[/bold] {risk['riskLevel']}    "
                f"[bold]Stop:[/bold] {risk['stopLossLevel']}    "
                f"[bold]Decay:[/bold] {risk['timeDecay']['level']}\n"
            )

        if compliance:
            content += (
                f"[bold]Compliance:[/bold] {OutputFormatter._color_code_grade(compliance['grade'])} "
                f"({compliance['overallScore']}/5)"
            )

        if content:
            renderables.append(Text.from_markup(content))

        console.print(
            Panel(
                Group(*renderables),
                title=f"[*] {result['symbol']} Trade Setup",
                subtitle=f"Evaluated: {result['timestamp'][:19]}",
                border_style=border_style,
            )
        )

    @staticmethod
    def format_json(results: List[Dict[str, Any]]) -> str:
        """
        Format results as JSON.

        Args:
            results: List of result dictionaries

        Returns:
            JSON string
        """
        if len(results) == 1:
            return json.dumps(results[0], indent=2)
        return json.dumps(results, indent=2)

    @staticmethod
    def format_csv(results: List[Dict[str, Any]]) -> str:
        """
        Format results as CSV.

        Args:
            results: List of result dictionaries

        Returns:
            CSV string
        """
        if not results:
            return ""

        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(CSV_COLUMNS)

        for result in results:
            setup = result.get("setup") or {}
            risk = result.get("riskManagement") or {}
            compliance = result.get("compliance") or {}
            targets = setup.get("targets") or []
            writer.writerow([
                result["symbol"],
                "ERROR" if "error" in result else result["action"],
                result["priority"],
                setup.get("entry", {}).get("price", ""),
                setup.get("stopLoss", {}).get("price", ""),
                targets[1]["price"] if len(targets) > 1 else "",
                setup.get("riskReward", ""),
                risk.get("positionSize", {}).get("percentage", ""),
                risk.get("riskLevel", ""),
                compliance.get("grade", ""),
                result["timestamp"],
            ])

        return buffer.getvalue().rstrip("\n")

    @staticmethod
    def print_progress(message: str, emoji: str = "[*]") -> None:
        """Print a progress message."""
        console.print(f"{emoji} {message}", style="dim")

    @staticmethod
    def print_success(message: str) -> None:
        """Print a success message."""
        console.print(f"[OK] {message}", style="green")

    @staticmethod
    def print_error(message: str) -> None:
        """Print an error message."""
        console.print(f"[ERROR] {message}", style="red bold")

    @staticmethod
    def print_warning(message: str) -> None:
        """Print a warning message."""
        console.print(f"[WARN] {message}", style="yellow")
