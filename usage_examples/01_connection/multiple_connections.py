"""
Multiple Connections Example

Demonstrates connecting several named connections declared in a YAML file,
with per-connection retry policies, failure isolation, cancellation from a
signal handler, and teardown through the client context manager.

Usage:
    python multiple_connections.py [path/to/docdb.yaml]
"""

import os
import signal
import sys
import threading

# Add parent directory to path for imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../..')))

from client import DocDBClient
# Import usage_examples utils (not a project package)
import importlib.util
utils_file_path = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'utils.py'))
spec = importlib.util.spec_from_file_location("example_utils", utils_file_path)
example_utils = importlib.util.module_from_spec(spec)
spec.loader.exec_module(example_utils)
print_section = example_utils.print_section
print_step = example_utils.print_step
print_success = example_utils.print_success
print_warning = example_utils.print_warning
print_info = example_utils.print_info
print_results = example_utils.print_results

DEFAULT_CONFIG = os.path.join(os.path.dirname(__file__), "docdb.yaml")


def main():
    """Main function to demonstrate named connections."""
    print_section("DocDB Multiple Connections Example")
    config_path = sys.argv[1] if len(sys.argv) > 1 else DEFAULT_CONFIG

    # Step 1: Build the client from the YAML file
    print_step(1, "Load Configuration")
    with DocDBClient(config_path) as client:
        for name, config in client.config.connections.items():
            print_info(name, config.uri)

        # Step 2: Allow Ctrl+C to stop pending retries
        print_step(2, "Connect All (Ctrl+C cancels pending retries)")
        cancel = threading.Event()
        signal.signal(signal.SIGINT, lambda signum, frame: cancel.set())
        results = client.registry.connect_all(client.config.connections, cancel_event=cancel)
        print_results(results)

        # Step 3: Use what connected; failures do not affect the others
        print_step(3, "Inspect Registered Connections")
        for name in client.registry.keys():
            print_success(f"{name} is available")
        for name, result in results.items():
            if not result.succeeded:
                print_warning(f"{name} unavailable: {result.error}")

        # Step 4: Close one connection early
        if "analytics" in client.registry:
            print_step(4, "Close 'analytics'")
            client.registry.close_one("analytics")
            print_info("Remaining", ", ".join(client.registry.keys()) or "none")

    print_section("Example Completed")
    print("\nKey Takeaways:")
    print("  - Each named connection is attempted, in order, independently")
    print("  - Per-connection retry_policy overrides the default policy")
    print("  - Leaving the client context closes every registered connection")


if __name__ == "__main__":
    main()
