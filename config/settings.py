import os
import sys
from dotenv import load_dotenv
from pydantic import ValidationError, Field
from pydantic_settings import BaseSettings
from util.enums import Environment
import logging


if os.getenv("APP_ENV", Environment.DEV) == Environment.DEV:
    load_dotenv()

_log = logging.getLogger("config.settings")


class Settings(BaseSettings):
    # App
    APP_ENV: str = Field(..., validation_alias="APP_ENV")
    REDIS_URL: str = Field(..., validation_alias="REDIS_URL")
    PERSISTENCE_TTL_SECONDS: int = Field(
        default=24 * 60 * 60, validation_alias="PERSISTENCE_TTL_SECONDS"
    )
    BATCH_STORE: str = Field(default="redis", validation_alias="BATCH_STORE")

    # CORS & Limits
    ALLOWED_ORIGIN: str = Field(..., validation_alias="ALLOWED_ORIGIN")
    RATE_LIMIT_TIMES: int = Field(default=30, validation_alias="RATE_LIMIT_TIMES")
    RATE_LIMIT_SECONDS: int = Field(default=60, validation_alias="RATE_LIMIT_SECONDS")
    TRUST_PROXY: bool = Field(default=False, validation_alias="TRUST_PROXY")
    MAX_BATCH_ITEMS: int = Field(default=10, validation_alias="MAX_BATCH_ITEMS")
    MAX_BATCH_ITEM_CHARS: int = 10_000

    # External URLS:
    GOOGLE_SEARCH_URL: str = "https://www.googleapis.com/customsearch/v1"
    WIKIPEDIA_API_URL: str = "https://en.wikipedia.org/w/api.php"
    GEMINI_API_URL: str = "https://generativelanguage.googleapis.com/v1beta/models"
    USER_AGENT: str = "PlagZap/1.0 (Educational Project)"

    # Search provider credentials (search is skipped when unset)
    GOOGLE_SEARCH_API_KEY: str = Field(default="", validation_alias="GOOGLE_SEARCH_API_KEY")
    GOOGLE_SEARCH_CX: str = Field(default="", validation_alias="GOOGLE_SEARCH_CX")
    SEARCH_TIMEOUT_SECONDS: float = 8.0
    WIKIPEDIA_TIMEOUT_SECONDS: float = 5.0

    # AI detection (heuristic fallback when unset)
    GEMINI_API_KEY: str = Field(default="", validation_alias="GEMINI_API_KEY")
    GEMINI_MODELS: list[str] = ["gemini-1.5-flash", "gemini-1.5-pro", "gemini-pro"]
    DETECT_TIMEOUT_SECONDS: float = 10.0
    DETECT_MAX_CHARS: int = 3000

    # Scoring engine
    CHUNK_SIZE: int = Field(default=300, validation_alias="CHUNK_SIZE")
    QUERY_SAMPLE_STRIDE: int = Field(default=2, validation_alias="QUERY_SAMPLE_STRIDE")
    QUERY_ALL_BELOW: int = Field(default=20, validation_alias="QUERY_ALL_BELOW")
    MAX_QUERIED_CHUNKS: int = Field(default=30, validation_alias="MAX_QUERIED_CHUNKS")
    QUERY_MAX_CHARS: int = 150
    MIN_SNIPPET_CHARS: int = 30
    PLAGIARISM_THRESHOLD: float = 0.30
    BATCH_CLEAN_THRESHOLD: int = 20
    QUERY_DELAY_SECONDS: float = Field(default=0.2, validation_alias="QUERY_DELAY_SECONDS")
    ITEM_DELAY_SECONDS: float = Field(default=0.5, validation_alias="ITEM_DELAY_SECONDS")

    # Logging knobs
    LOGGER_NAME: str = "plagzap"
    LOG_LEVEL: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    LOG_TO_FILE: bool = Field(default=False, validation_alias="LOG_TO_FILE")
    LOG_DIR: str = Field(default="logs", validation_alias="LOG_DIR")
    LOG_FILE_NAME: str = Field(default="app.log", validation_alias="LOG_FILE_NAME")
    LOG_MAX_BYTES: int = Field(
        default=50 * 1024 * 1024, validation_alias="LOG_MAX_BYTES"
    )
    LOG_BACKUP_COUNT: int = Field(default=5, validation_alias="LOG_BACKUP_COUNT")

    # Prompts
    AI_DETECTION_PROMPT: str = (
        "You are an AI content detector. Analyze the following text to determine if it was written "
        "by AI (like ChatGPT, Claude, Gemini) or by a human.\n"
        "\n"
        "SCORING GUIDELINES:\n"
        "- 0-20%: Clearly human-written (personal voice, imperfections, unique style)\n"
        "- 20-40%: Probably human (some AI-like patterns but mostly human)\n"
        "- 40-60%: Mixed/Uncertain (could be either)\n"
        "- 60-80%: Probably AI (formal, structured, AI patterns)\n"
        "- 80-100%: Clearly AI-written (perfect grammar, generic explanations, no personality)\n"
        "\n"
        "AI INDICATORS (increase score):\n"
        "- Perfect grammar and punctuation\n"
        "- Repetitive sentence structures\n"
        "- Generic, encyclopedic explanations\n"
        "- Overuse of transition words (Furthermore, Moreover, Additionally)\n"
        "- Lack of personal opinions or emotions\n"
        "- Lists with consistent formatting\n"
        "\n"
        "HUMAN INDICATORS (decrease score):\n"
        "- Contractions (don't, can't, won't)\n"
        "- Personal opinions and experiences\n"
        "- Conversational tone, informal language or slang\n"
        "- Minor grammatical imperfections\n"
        "\n"
        "Respond with ONLY valid JSON in this exact format:\n"
        '{"score": <number 0-100>, "reason": "<brief explanation>", "language": "<detected language>"}\n'
        "\n"
        "Text to analyze:\n"
    )


try:
    settings = Settings()
except ValidationError as e:
    print("❌ Missing/invalid environment variables:", file=sys.stderr)
    for err in e.errors():
        loc = ".".join(str(x) for x in err.get("loc", []))
        msg = err.get("msg", "")
        print(f" - {loc}: {msg}", file=sys.stderr)
    sys.exit(1)
except Exception as e:
    print(f"❌ Settings initialization failed: {e}", file=sys.stderr)
    sys.exit(1)
