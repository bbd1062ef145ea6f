from __future__ import annotations
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from dotenv import load_dotenv

from .exceptions import ConfigurationError

USER_CFG = Path.home() / ".config" / "testcase-generator" / "config.toml"
PROJECT_CFG = Path.cwd() / "testcase_generator.toml"

PROVIDERS = ("gemini", "openai", "mock")

API_KEY_ENV: Dict[str, str] = {
    "gemini": "GEMINI_API_KEY",
    "openai": "OPENAI_API_KEY",
}

DEFAULT_MODELS: Dict[str, str] = {
    "gemini": "gemini-2.0-flash",
    "openai": "gpt-4o-mini",
    "mock": "mock",
}

DEFAULTS: Dict[str, object] = {
    "provider": "gemini",
    "model": None,
    "base_url": None,
    "request_timeout": 60.0,
    "temperature": None,
    "prompt_warn_chars": 100_000,
}


@dataclass(frozen=True)
class Settings:
    """Resolved settings for one process."""
    provider: str = "gemini"
    model: Optional[str] = None
    api_key: Optional[str] = field(default=None, repr=False)
    base_url: Optional[str] = None
    request_timeout: float = 60.0
    temperature: Optional[float] = None
    prompt_warn_chars: int = 100_000

    @property
    def model_name(self) -> str:
        return self.model or DEFAULT_MODELS.get(self.provider, "")

    def require_api_key(self) -> str:
        """Return the API key, failing fast when the provider needs one and none is set."""
        if self.provider == "mock":
            return self.api_key or ""
        if not self.api_key:
            env_name = API_KEY_ENV.get(self.provider, "API key")
            raise ConfigurationError(f"{env_name} is not set")
        return self.api_key


def _read_toml(path: Path) -> Dict:
    if not path.exists():
        return {}
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid config file {path}: {e}") from e


def init_default_config(force: bool = False) -> Path:
    target = USER_CFG
    target.parent.mkdir(parents=True, exist_ok=True)
    if target.exists() and not force:
        return target
    text = """# testcase-generator config (user)
# You can override any of these in a project-local ./testcase_generator.toml
# API keys belong in the environment or a .env file (GEMINI_API_KEY, OPENAI_API_KEY)

provider = "gemini"          # gemini | openai | mock
# model = "gemini-2.0-flash"   # defaults per provider: gemini-2.0-flash, gpt-4o-mini
# base_url = "http://localhost:8080/v1"   # openai provider only
request_timeout = 60         # seconds, upper bound on one provider round trip
# temperature = 0.2
prompt_warn_chars = 100000   # log a warning when a story/document is longer
"""
    target.write_text(text)
    return target


def _coerce(name: str, v):
    if v is None:
        return None
    try:
        if name in {"request_timeout", "temperature"}:
            return float(v)
        if name == "prompt_warn_chars":
            return int(v)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid value for {name}: {v!r}") from e
    return v


def merged_config(env_file: Optional[Path] = None) -> Dict:
    """Merge defaults -> user TOML -> project TOML -> environment."""
    load_dotenv(env_file)

    cfg_user = _read_toml(USER_CFG)
    cfg_proj = _read_toml(PROJECT_CFG)

    env = {
        "provider": os.getenv("TESTCASE_GEN_PROVIDER"),
        "model": os.getenv("TESTCASE_GEN_MODEL"),
        "base_url": os.getenv("TESTCASE_GEN_BASE_URL"),
        "request_timeout": os.getenv("TESTCASE_GEN_TIMEOUT"),
        "temperature": os.getenv("TESTCASE_GEN_TEMPERATURE"),
        "prompt_warn_chars": os.getenv("TESTCASE_GEN_PROMPT_WARN_CHARS"),
    }

    settings = DEFAULTS.copy()
    def overlay(d: Dict):
        if not isinstance(d, dict): return
        for k in settings.keys():
            if k in d and d[k] is not None:
                settings[k] = _coerce(k, d[k])
    overlay(cfg_user)
    overlay(cfg_proj)
    overlay(env)
    return settings


def load_settings(env_file: Optional[Path] = None, **overrides) -> Settings:
    """
    Resolve settings for this process.

    Keyword overrides (e.g. from CLI flags) win over every file and environment
    layer; None values are ignored.
    """
    values = merged_config(env_file)
    values.update({k: v for k, v in overrides.items() if v is not None and k != "api_key"})

    provider = str(values["provider"]).lower()
    if provider not in PROVIDERS:
        raise ConfigurationError(
            f"Unknown provider '{provider}'. Choose one of: {', '.join(PROVIDERS)}"
        )

    api_key = overrides.get("api_key")
    if not api_key and provider in API_KEY_ENV:
        api_key = os.getenv(API_KEY_ENV[provider])

    timeout = _coerce("request_timeout", values["request_timeout"])
    if timeout is None or timeout <= 0:
        raise ConfigurationError("request_timeout must be a positive number of seconds")

    return Settings(
        provider=provider,
        model=values["model"],
        api_key=api_key,
        base_url=values["base_url"],
        request_timeout=timeout,
        temperature=_coerce("temperature", values["temperature"]),
        prompt_warn_chars=_coerce("prompt_warn_chars", values["prompt_warn_chars"]),
    )
