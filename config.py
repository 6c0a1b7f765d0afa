# Configuration for the narrative world engine
#
# Everything is read from environment variables. Secrets never go into this
# file; set OPENAI_API_KEY in the environment (or a gitignored .env loaded by
# your shell). A missing key is not an import error: turns fail fast with a
# critical-error narrative instead.

import os

# OpenAI API Configuration
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL") or None

OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
OPENAI_TEMPERATURE = float(os.getenv("OPENAI_TEMPERATURE", "0.6"))
OPENAI_MAX_TOKENS = (
    int(os.environ["OPENAI_MAX_TOKENS"]) if os.getenv("OPENAI_MAX_TOKENS") else None
)

# Narrative pass (final prose request, tools disabled)
NARRATIVE_MODEL = os.getenv("NARRATIVE_MODEL", OPENAI_MODEL)
NARRATIVE_TEMPERATURE = float(os.getenv("NARRATIVE_TEMPERATURE", "0.8"))

# Turn loop
MAX_TOOL_ITERATIONS = int(os.getenv("MAX_TOOL_ITERATIONS", "5"))
LLM_TIMEOUT_SECONDS = float(os.getenv("LLM_TIMEOUT_SECONDS", "60"))

# Retry/backoff for transient transport failures
RETRY_MAX_RETRIES = int(os.getenv("RETRY_MAX_RETRIES", "3"))
RETRY_INITIAL_DELAY = float(os.getenv("RETRY_INITIAL_DELAY", "1.0"))  # seconds
RETRY_MAX_DELAY = float(os.getenv("RETRY_MAX_DELAY", "10.0"))  # seconds
RETRY_BACKOFF_FACTOR = float(os.getenv("RETRY_BACKOFF_FACTOR", "2.0"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Example .env file content:
# OPENAI_API_KEY=your-actual-api-key-here
# OPENAI_MODEL=gpt-4o-mini
# NARRATIVE_MODEL=gpt-4o
# MAX_TOOL_ITERATIONS=5
