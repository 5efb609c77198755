#!/usr/bin/env python3
"""Run the Keycloak login e2e suite with the configured workers and retries.

Reads PARALLEL_WORKERS and RETRY_COUNT (plus everything else the suite
settings read) and hands the resulting options to pytest. Extra arguments
are passed through unchanged, e.g.:

    python scripts/run_e2e.py -k negative -x
"""

import os
import sys

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from keycloak_e2e.config import load_settings
from keycloak_e2e.runner import build_pytest_args, per_test_timeout_seconds


def main():
    settings = load_settings()
    args = build_pytest_args(settings, extra_args=sys.argv[1:])

    print("🧪 Keycloak Login E2E Suite")
    print("=" * 60)
    print(f"🌐 KEYCLOAK_URL: {settings.auth_path}")
    print(f"🖥️  Environment: {settings.environment_label}")
    print(f"👷 Workers: {settings.parallel_workers}")
    print(f"🔁 Retries: {settings.retry_count}")
    print(f"⏱️  Per-test timeout: {per_test_timeout_seconds(settings.timeouts):.0f}s")
    print(f"▶️  pytest {' '.join(args)}")
    print()

    sys.exit(pytest.main(args))


if __name__ == "__main__":
    main()
