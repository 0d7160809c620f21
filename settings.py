# settings.py
# Environment configuration (.env is loaded by python-dotenv).

import math
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from tapsim_api import DEFAULT_API_BASE


class ConfigError(RuntimeError):
    pass


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    v = (env.get(name) or "").strip()
    if v.isdecimal() and v.isascii():
        return int(v)
    return default


def _env_float(env: Mapping[str, str], name: str, default: float) -> float:
    """Positive, finite float or the default (0/inf would disable a timeout)."""
    v = (env.get(name) or "").strip()
    try:
        f = float(v) if v else default
    except ValueError:
        return default
    if not math.isfinite(f) or f <= 0:
        return default
    return f


@dataclass(frozen=True)
class Settings:
    token: str
    hatches_channel_id: int = 0          # 0 = auto-post disabled
    post_interval_minutes: int = 5
    click_emoji: str = "<:ClickIcon:1467297249103974683>"
    token_emoji: str = "<:token:1467296721502736384>"
    api_base: str = DEFAULT_API_BASE
    command_prefix: str = "!"
    http_timeout: float = 10.0
    http_retry_backoff: float = 2.0
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        if env is None:
            load_dotenv()  # .env next to the script or in the cwd
            env = os.environ

        token = (env.get("DISCORD_TOKEN") or env.get("TOKEN") or "").strip()
        if not token:
            raise ConfigError("DISCORD_TOKEN (or TOKEN) is missing in .env")

        return cls(
            token=token,
            hatches_channel_id=_env_int(env, "HATCHES_CHANNEL_ID", 0),
            post_interval_minutes=max(_env_int(env, "POST_INTERVAL_MINUTES", 5), 1),
            click_emoji=env.get("CLICK_EMOJI") or cls.click_emoji,
            token_emoji=env.get("TOKEN_EMOJI") or cls.token_emoji,
            api_base=(env.get("TAPSIM_API_BASE") or DEFAULT_API_BASE).strip(),
            command_prefix=env.get("COMMAND_PREFIX") or cls.command_prefix,
            http_timeout=_env_float(env, "HTTP_TIMEOUT_SECONDS", cls.http_timeout),
            http_retry_backoff=_env_float(env, "HTTP_RETRY_BACKOFF_SECONDS", cls.http_retry_backoff),
            log_level=(env.get("LOG_LEVEL") or cls.log_level).strip().upper(),
        )
