"""
Shared constants for searchchat.

User-visible strings are in the same language as the assistant's replies.
"""

# ── Endpoint ──
AGENT_PATH = "/api/agent"

# ── HTTP error bodies (programmatic callers) ──
MESSAGE_REQUIRED = "message is required"
METHOD_NOT_ALLOWED = "Method not allowed"
INTERNAL_SERVER_ERROR = "Internal server error"

# ── Chat-visible messages ──
STREAM_ERROR_MESSAGE = "ストリームエラー"
ERROR_PREFIX = "エラー: "
CONNECTION_ERROR_MESSAGE = "通信エラーが発生しました"

# ── Agent defaults ──
DEFAULT_PROVIDER = "bedrock"
DEFAULT_MODEL = "us.anthropic.claude-haiku-4-5-20251001-v1:0"
DEFAULT_REGION = "us-east-1"
DEFAULT_SYSTEM_PROMPT = (
    "あなたは日本語で応答するアシスタントです。"
    "Web検索ツールを使って最新の情報を調べることができます。"
)
