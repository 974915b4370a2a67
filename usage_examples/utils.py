"""
Common Utilities for DocDB Usage Examples

Provides console formatting helpers shared by the usage examples.
"""

from typing import Any, Dict

from connection_management import ConnectionAttemptResult


def print_section(title: str, width: int = 60):
    """
    Print a formatted section header.

    Args:
        title: Section title
        width: Width of the header line
    """
    print("\n" + "=" * width)
    print(f" {title}")
    print("=" * width)


def print_step(step_num: int, description: str):
    """Print a step description."""
    print(f"\n[Step {step_num}] {description}")


def print_success(message: str):
    print(f"[SUCCESS] {message}")


def print_error(message: str):
    print(f"[ERROR] {message}")


def print_warning(message: str):
    print(f"[WARNING] {message}")


def print_info(key: str, value: Any):
    """Print information in key-value format."""
    print(f"  - {key}: {value}")


def print_results(results: Dict[str, ConnectionAttemptResult]):
    """
    Print one line per connection attempt result.

    Args:
        results: Mapping of connection name to result, as returned by
            ``connect_all``.
    """
    if not results:
        print("No connections attempted")
        return

    print("-" * 60)
    print(f"{'Name':<15} {'Status':<10} {'Attempts':<10} {'Error':<25}")
    print("-" * 60)
    for name, result in results.items():
        error = type(result.error).__name__ if result.error else ""
        print(f"{name:<15} {result.status.value:<10} {result.attempts:<10} {error:<25}")
    print("-" * 60)
