"""
Basic Connection Example

Demonstrates how to open a single MongoDB connection with retry and
backoff, inspect the attempt result, and close the handle again.

Set DOCDB_EXAMPLE_URI to point at a server; defaults to localhost.
"""

import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../..')))

from config import configure_logging, load_settings
from connection_management import ConnectionRegistry, RetryPolicy
# Import usage_examples utils (not a project package)
import importlib.util
utils_file_path = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'utils.py'))
spec = importlib.util.spec_from_file_location("example_utils", utils_file_path)
example_utils = importlib.util.module_from_spec(spec)
spec.loader.exec_module(example_utils)
print_section = example_utils.print_section
print_step = example_utils.print_step
print_success = example_utils.print_success
print_info = example_utils.print_info
print_error = example_utils.print_error


def main():
    """Main function to demonstrate a single connection."""
    print_section("DocDB Basic Connection Example")

    # Step 1: Load settings and logging
    print_step(1, "Load Settings")
    settings = load_settings()
    configure_logging(settings.logging)
    print_info("Max attempts", settings.retry.max_attempts)
    print_info("Base interval", f"{settings.retry.base_interval_ms}ms")
    print_info("Backoff factor", settings.retry.backoff_factor)
    print_info("Max pool size", settings.pool.max_pool_size)

    # Step 2: Connect with a short retry policy
    print_step(2, "Connect")
    uri = os.environ.get("DOCDB_EXAMPLE_URI", "mongodb://localhost:27017/example")
    registry = ConnectionRegistry(
        settings=settings,
        retry_policy=RetryPolicy(max_attempts=3, base_interval_ms=500, backoff_factor=2),
    )
    result = registry.connect({"uri": uri, "options": {"serverSelectionTimeoutMS": 2000}})

    if not result.succeeded:
        print_error(f"Connection failed after {result.attempts} attempts: {result.error}")
        return
    print_success(f"Connected after {result.attempts} attempt(s)")

    # Step 3: Use the handle
    print_step(3, "List Databases")
    client = result.handle
    print_info("Databases", ", ".join(client.list_database_names()))

    # Step 4: Close. connect() does not register, so the caller owns the handle.
    print_step(4, "Close Connection")
    registry.connector.close(client)
    print_success("Connection closed")

    print_section("Example Completed")
    print("\nKey Takeaways:")
    print("  - connect() retries with exponential backoff and never raises")
    print("  - The result carries either a live handle or the last error")
    print("  - Unregistered handles are closed by the caller")


if __name__ == "__main__":
    main()
