#region Imports
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from llm_spend.config.settings import PROMPT_TEXT_LIMIT, SYNTHETIC_MODEL
from llm_spend.models.pricing import compute_cost_usd, infer_provider
from llm_spend.models.usage_event import Source, UsageEvent
#endregion


logger = logging.getLogger(__name__)


#region Functions


def parse_jsonl_file(
    file_path: Path,
    project_path: Optional[str],
    seen: set[str],
) -> list[UsageEvent]:
    """
    Parse a single JSONL file into usage events.

    Extracts one event per assistant message carrying usage data, including:
    - Token usage (input, output, cache creation, cache read)
    - Session metadata (session id, project path, side-chain flag)
    - The last human-written prompt that preceded the request

    Request ids already in `seen` are skipped and new ones are added to it.
    The caller owns `seen` for the duration of one load; it is not retained.

    Args:
        file_path: Path to the JSONL file to parse
        project_path: Project path resolved from the session index, if any
        seen: Request ids already emitted during this load

    Returns:
        Events in file order. An unreadable file yields an empty list.
    """
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            lines = f.read().split("\n")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Skipping unreadable log file %s: %s", file_path, e)
        return []

    events: list[UsageEvent] = []
    last_human_text: Optional[str] = None

    for line_num, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line:
            continue

        try:
            data = json.loads(line)
        except json.JSONDecodeError:
            logger.debug("Skipping malformed JSON at %s:%d", file_path, line_num)
            continue
        if not isinstance(data, dict):
            continue

        record_type = data.get("type")

        if record_type == "user":
            message = data.get("message")
            if isinstance(message, dict):
                text = extract_human_text(message.get("content"))
                if text:
                    last_human_text = text
            continue

        if record_type != "assistant":
            continue

        event = _parse_assistant_record(data, project_path, seen, last_human_text)
        if event is not None:
            events.append(event)

    return events


def extract_human_text(content: Any) -> Optional[str]:
    """
    Extract the human-written text of a user turn.

    Plain string content is used as-is. For content blocks only "text" items
    count; tool_result blocks are tool output, not something the user typed.

    Args:
        content: The `message.content` value of a user record

    Returns:
        Trimmed text truncated to 400 characters, or None if there is none
    """
    if isinstance(content, str):
        return content.strip()[:PROMPT_TEXT_LIMIT] or None

    if isinstance(content, list):
        parts = []
        for block in content:
            if not isinstance(block, dict) or block.get("type") != "text":
                continue
            text = block.get("text")
            if isinstance(text, str):
                parts.append(text.strip())
        joined = " ".join(parts).strip()
        return joined[:PROMPT_TEXT_LIMIT] or None

    return None


def _parse_assistant_record(
    data: dict,
    project_path: Optional[str],
    seen: set[str],
    prompt_text: Optional[str],
) -> Optional[UsageEvent]:
    """
    Build a UsageEvent from an assistant record, or None if it is not billable.

    The request id is claimed before the model is checked, so a synthetic
    record still shadows later records with the same id.
    """
    message = data.get("message")
    if not isinstance(message, dict):
        return None

    usage = message.get("usage")
    if not isinstance(usage, dict):
        return None

    request_id = message.get("id")
    if not isinstance(request_id, str) or not request_id or request_id in seen:
        return None
    seen.add(request_id)

    model = message.get("model")
    if not isinstance(model, str) or not model or model == SYNTHETIC_MODEL:
        return None

    input_tokens = _token_count(usage, "input_tokens")
    output_tokens = _token_count(usage, "output_tokens")
    cache_creation_tokens = _token_count(usage, "cache_creation_input_tokens")
    cache_read_tokens = _token_count(usage, "cache_read_input_tokens")

    occurred_at = data.get("timestamp")
    if not isinstance(occurred_at, str) or not occurred_at:
        occurred_at = _utc_now_iso()
        logger.warning("Record %s has no timestamp; stamping current time %s", request_id, occurred_at)

    return UsageEvent(
        provider=infer_provider(model),
        model=model,
        request_id=request_id,
        occurred_at=occurred_at,
        session_id=_string_field(data, "sessionId"),
        project_path=project_path or _string_field(data, "cwd"),
        input_tokens=input_tokens,
        output_tokens=output_tokens,
        cache_creation_tokens=cache_creation_tokens,
        cache_read_tokens=cache_read_tokens,
        cost_usd=compute_cost_usd(
            model, input_tokens, output_tokens, cache_creation_tokens, cache_read_tokens
        ),
        source=Source.SUBAGENT if data.get("isSidechain") is True else Source.PRIMARY,
        prompt_text=prompt_text,
    )


def _token_count(usage: dict, key: str) -> int:
    """Read a token counter, defaulting absent or invalid values to 0."""
    value = usage.get(key)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        return 0
    return value


def _string_field(data: dict, key: str) -> Optional[str]:
    value = data.get(key)
    return value if isinstance(value, str) and value else None


def _utc_now_iso() -> str:
    """Current UTC time as 'YYYY-MM-DDTHH:MM:SS.mmmZ'."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


#endregion
