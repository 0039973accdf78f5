"""Root conftest: shared test configuration."""

import os

# Ensure tests don't accidentally use real API keys
os.environ.setdefault("AGENTWIRE_ANTHROPIC_API_KEY", "sk-ant-test-fake-key")
