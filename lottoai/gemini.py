# lottoai/gemini.py
from __future__ import annotations
import asyncio, base64, json, logging, os, re
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from .schemas import AIStrategy, LotteryConfig, Pool, PredictedNumbers

log = logging.getLogger("lottoai.gemini")

GEMINI_MODEL    = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
GEMINI_BASE_URL = os.getenv("GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta")
TIMEOUT         = httpx.Timeout(float(os.getenv("AI_TIMEOUT", "30")), connect=5.0)
HEADERS         = {"User-Agent": "lottoai/1.0"}
RETRIES         = 2
RETRY_DELAY     = 0.5

class AIServiceError(Exception):
    pass

class AINotConfiguredError(AIServiceError):
    pass

class AIResponseError(AIServiceError):
    pass

STRATEGY_GUIDANCE: Dict[str, str] = {
    "balanced": "Balance the selection: mix frequently drawn (hot) numbers, rarely drawn (cold) numbers "
                "and numbers that have not appeared for a long time (overdue), with a sensible spread "
                "of odd/even and low/high numbers.",
    "hot":      "Favour the hot numbers: the numbers that appear most often in the historical draws, "
                "especially in the most recent ones.",
    "overdue":  "Favour the overdue numbers: the numbers that have gone the longest without being drawn.",
}

EXTRACT_PROMPT = (
    "This image shows historical lottery results. Extract every draw you can read. "
    "Output plain text only, one draw per line, oldest draw first, numbers separated by single spaces: "
    "the main numbers first, then any bonus or special ball numbers. "
    "Do not include dates, draw numbers, prize amounts or any other text."
)

CLEAN_PROMPT = (
    "The text below is pasted lottery history and may contain dates, draw ids, labels, prize tables "
    "and broken formatting. Rewrite it as plain text, one draw per line, oldest draw first, numbers "
    "separated by single spaces: the main numbers first, then any bonus or special ball numbers. "
    "Drop everything that is not a drawn number. Output only the cleaned lines.\n\n"
)

_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*|\s*```$")

def api_key() -> str:
    return os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY") or ""

def is_configured() -> bool:
    return bool(api_key())

def _client() -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=TIMEOUT, headers=HEADERS, http2=True)

async def _post_json(url: str, payload: Dict[str, Any], client: httpx.AsyncClient,
                     headers: Dict[str, str], retries: int = RETRIES) -> Dict[str, Any]:
    last: Optional[Exception] = None
    for attempt in range(retries + 1):
        try:
            r = await client.post(url, json=payload, headers=headers)
        except httpx.TransportError as e:
            last = e
        else:
            if r.status_code == 429 or r.status_code >= 500:
                last = AIServiceError(f"AI service returned HTTP {r.status_code}")
            elif r.is_error:
                raise AIServiceError(f"AI service rejected the request: HTTP {r.status_code} {r.text[:200]}")
            else:
                try:
                    return r.json()
                except ValueError as e:
                    raise AIResponseError("AI service returned a non-JSON body") from e
        if attempt < retries:
            log.warning(f"AI request failed ({last}), retry {attempt + 1}/{retries}")
            await asyncio.sleep(RETRY_DELAY)
    raise AIServiceError(f"AI service unavailable: {last}") from last

def _response_text(data: Any) -> str:
    if not isinstance(data, dict):
        raise AIResponseError("AI service returned an unexpected body")
    candidates = data.get("candidates") or []
    if not candidates:
        reason = (data.get("promptFeedback") or {}).get("blockReason")
        raise AIResponseError(f"AI service returned no candidates (block reason: {reason})")
    parts = (candidates[0].get("content") or {}).get("parts") or []
    text = "".join(p.get("text", "") for p in parts if isinstance(p, dict))
    if not text.strip():
        raise AIResponseError("AI service returned an empty answer")
    return _FENCE_RE.sub("", text.strip())

async def generate(parts: List[Dict[str, Any]], schema: Optional[Dict[str, Any]] = None) -> str:
    """One generateContent round trip; returns the answer text."""
    key = api_key()
    if not key:
        raise AINotConfiguredError("API key is not configured")
    payload: Dict[str, Any] = {"contents": [{"role": "user", "parts": parts}]}
    if schema is not None:
        payload["generationConfig"] = {"responseMimeType": "application/json", "responseSchema": schema}
    url = f"{GEMINI_BASE_URL}/models/{GEMINI_MODEL}:generateContent"
    async with _client() as client:
        data = await _post_json(url, payload, client, headers={"x-goog-api-key": key})
    text = _response_text(data)
    log.info(f"AI answer received ({len(text)} chars, model={GEMINI_MODEL})")
    return text

# ---- prediction ----
def _describe_pool(pool: Pool, label: str) -> str:
    return f"{pool.count} {label} from {pool.range.min} to {pool.range.max}"

def describe_game(config: LotteryConfig) -> str:
    text = f"{config.game_name}: pick {_describe_pool(config.main, 'main numbers')}"
    if config.special is not None:
        text += f" and {_describe_pool(config.special, config.special_name or 'special numbers')}"
    return text + ". Numbers within one pool must be unique."

_INTS = {"type": "ARRAY", "items": {"type": "INTEGER"}}
PREDICTION_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {"mainNumbers": _INTS, "specialNumbers": _INTS, "explanation": {"type": "STRING"}},
    "required": ["mainNumbers", "specialNumbers", "explanation"],
}

def build_prediction_prompt(historical_text: str, config: LotteryConfig, strategy: AIStrategy) -> str:
    special = "an empty specialNumbers list" if config.special is None else \
        f"exactly {config.special.count} specialNumbers ({config.special_name})"
    return (
        "You are a lottery number analyst.\n"
        f"Game: {describe_game(config)}\n"
        f"Strategy: {STRATEGY_GUIDANCE[strategy]}\n"
        "Historical draws, oldest first, one per line:\n"
        f"{historical_text.strip()}\n\n"
        f"Answer with exactly {config.main.count} mainNumbers, {special}, "
        "and an explanation of a few sentences describing the patterns behind the choice."
    )

def _check_pool(numbers: List[int], pool: Optional[Pool], label: str) -> None:
    want = pool.count if pool is not None else 0
    if len(numbers) != want:
        raise AIResponseError(f"expected {want} {label}, got {len(numbers)}")
    if len(set(numbers)) != len(numbers):
        raise AIResponseError(f"duplicate {label}: {numbers}")
    if pool is not None and any(n not in pool.range for n in numbers):
        raise AIResponseError(f"{label} out of range {pool.range.min}-{pool.range.max}: {numbers}")

def parse_prediction(text: str, config: LotteryConfig) -> PredictedNumbers:
    try:
        pred = PredictedNumbers.model_validate(json.loads(text))
    except (ValueError, ValidationError) as e:
        raise AIResponseError(f"unreadable prediction: {e}") from e
    _check_pool(pred.main_numbers, config.main, "main numbers")
    _check_pool(pred.special_numbers, config.special, "special numbers")
    return pred

async def predict_numbers(historical_text: str, config: LotteryConfig, strategy: AIStrategy = "balanced") -> PredictedNumbers:
    prompt = build_prediction_prompt(historical_text, config, strategy)
    text = await generate([{"text": prompt}], schema=PREDICTION_SCHEMA)
    return parse_prediction(text, config)

# ---- data entry helpers ----
async def extract_numbers_from_image(image: bytes, mime_type: str) -> str:
    parts = [
        {"inline_data": {"mime_type": mime_type, "data": base64.b64encode(image).decode("ascii")}},
        {"text": EXTRACT_PROMPT},
    ]
    return await generate(parts)

async def clean_and_format_data(text: str) -> str:
    return await generate([{"text": CLEAN_PROMPT + text}])
