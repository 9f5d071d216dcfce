#!/usr/bin/env python
"""
Combined runner for local and single-host deployments.
Starts the tank publisher (HTTP -> MQTT) and the alert subscriber.
"""
import subprocess
import sys
import signal
import time

SERVICES = [
    ("Tank publisher", "publisher_service.publisher_service"),
    ("Alert subscriber", "alerting_service.alerting_service"),
]

processes = []


def cleanup(signum=None, frame=None):
    """Terminate all child processes."""
    print("\nShutting down all services...")
    for proc in processes:
        if proc.poll() is None:
            proc.terminate()
    for proc in processes:
        try:
            proc.wait(timeout=10)
        except subprocess.TimeoutExpired:
            proc.kill()
    sys.exit(0)


def main():
    signal.signal(signal.SIGTERM, cleanup)
    signal.signal(signal.SIGINT, cleanup)

    print("Starting Tankscape relay services...")

    for label, module in SERVICES:
        proc = subprocess.Popen(
            [sys.executable, "-m", module],
            stdout=sys.stdout,
            stderr=sys.stderr
        )
        processes.append(proc)
        print(f"{label} started (PID: {proc.pid})")

    # Wait for processes
    while True:
        for proc in processes:
            if proc.poll() is not None:
                print(f"Process {proc.pid} exited with code {proc.returncode}")
                cleanup()
        time.sleep(1)


if __name__ == "__main__":
    main()
