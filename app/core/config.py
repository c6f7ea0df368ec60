"""
Application configuration (env, settings, constants).

Responsibility: Centralize config loading, environment variables, and app-wide
constants. Keeps the rest of the app decoupled from how config is sourced.
"""

import os

from dotenv import load_dotenv

load_dotenv()

# Server identity reported on initialize
SERVER_NAME: str = "MiniMax Search MCP Server"
SERVER_VERSION: str = "1.0.0"
PROTOCOL_VERSION: str = "2024-11-05"

# SSE keep-alive interval (seconds)
HEARTBEAT_INTERVAL: float = float(os.getenv("HEARTBEAT_INTERVAL", "15"))

# MiniMax (OpenAI-compatible chat completions)
MINIMAX_API_KEY: str = os.getenv("MINIMAX_API_KEY", "").strip()
MINIMAX_BASE_URL: str = (
    os.getenv("MINIMAX_BASE_URL", "https://api.minimax.io/v1").strip() or "https://api.minimax.io/v1"
)
MINIMAX_MODEL: str = os.getenv("MINIMAX_MODEL", "MiniMax-M2").strip() or "MiniMax-M2"

# Serper (Google search)
SERPER_API_KEY: str = os.getenv("SERPER_API_KEY", "").strip()
SERPER_SEARCH_URL: str = "https://google.serper.dev/search"
SERPER_NUM_RESULTS: int = 10

# Jina Reader (page fetch). Key is optional.
JINA_API_KEY: str = os.getenv("JINA_API_KEY", "").strip()
JINA_READER_URL: str = "https://r.jina.ai/"

# API timeouts (seconds)
SEARCH_API_TIMEOUT: float = 30.0
READER_API_TIMEOUT: float = 90.0
LLM_API_TIMEOUT: float = 300.0

# Answerer: 1 token ~ 4 characters
ANSWER_TOKEN_LIMIT: int = 190000
CHARS_PER_TOKEN: int = 4
CHUNK_OVERLAP: int = 1024

# Retry budgets; backoff sleeps RETRY_BACKOFF_BASE * 2**attempt seconds
SEARCH_MAX_RETRY: int = 3
BROWSE_MAX_RETRY: int = 3
LLM_MAX_RETRY: int = 2
RETRY_BACKOFF_BASE: float = float(os.getenv("RETRY_BACKOFF_BASE", "1.0"))
