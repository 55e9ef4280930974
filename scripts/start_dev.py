#!/usr/bin/env python3
"""
Development startup script.

Starts the payment and email functions in development mode.
"""

import os
import sys
import shutil
import subprocess
from pathlib import Path

# Project root
PROJECT_ROOT = Path(__file__).parent.parent


def check_dependencies():
    """Check if required dependencies are installed."""
    try:
        import fastapi
        import uvicorn
        import httpx
        import pydantic_settings
        print("✓ All core dependencies installed")
        return True
    except ImportError as e:
        print(f"✗ Missing dependency: {e.name}")
        print("\nRun: pip install -e .[test]")
        return False


def check_env():
    """Check if .env file exists."""
    env_file = PROJECT_ROOT / ".env"
    env_example = PROJECT_ROOT / ".env.example"

    if env_file.exists():
        print("✓ Configuration file found")
        return True
    elif env_example.exists():
        print("! Configuration file not found, copying from example...")
        shutil.copy(env_example, env_file)
        print("✓ Created .env from example")
        print("  Please set SQUARE_ACCESS_TOKEN, SQUARE_LOCATION_ID and SENDGRID_API_KEY")
        return True
    else:
        print("! No configuration file found; unconfigured providers answer 500")
        return True


def start_functions(port: int):
    """Run the functions app with reload until interrupted."""
    print(f"\n🍞 Starting functions on http://localhost:{port} ...")
    process = subprocess.Popen(
        [
            sys.executable, "-m", "uvicorn",
            "cottage_payments.main:app",
            "--reload",
            "--host", "0.0.0.0",
            "--port", str(port),
        ],
        cwd=PROJECT_ROOT,
        env={**os.environ, "DEBUG": os.environ.get("DEBUG", "true")},
    )

    print("\n" + "=" * 60)
    print(f"📍 Payments: http://localhost:{port}/process-payment")
    print(f"📍 Email:    http://localhost:{port}/send-email")
    print(f"📍 API docs: http://localhost:{port}/docs")
    print("\nPress Ctrl+C to stop")
    print("=" * 60)

    try:
        process.wait()
    except KeyboardInterrupt:
        print("\n\nShutting down...")
        process.terminate()
        process.wait()
        print("Stopped.")


def main():
    print("=" * 60)
    print("Little Loaf Cottage - Development Server")
    print("=" * 60)

    print("\nRunning pre-flight checks...")

    if not check_dependencies():
        sys.exit(1)

    check_env()

    print("\n✓ All checks passed!")

    start_functions(int(os.environ.get("PORT", "8888")))


if __name__ == "__main__":
    main()
