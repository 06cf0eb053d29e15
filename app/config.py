"""
app/config.py

Environment-selected configuration for ELB log ingestion.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

DEFAULT_ENVIRONMENT = "LOCAL"

# Built-in per-environment defaults. bulk_limit 6000 (~3MB of ELB lines) lets a
# typical access log file be indexed in a single bulk call.
_ENVIRONMENT_DEFAULTS: dict[str, dict[str, object]] = {
    "LIVE": {
        "debug": False,
        "elk_url": None,
        "bulk_limit": 6000,
        "region": "eu-west-1",
    },
    "DEV": {
        "debug": False,
        "elk_url": None,
        "bulk_limit": 6000,
        "region": "eu-west-1",
    },
    "LOCAL": {
        "debug": True,
        "elk_url": "http://127.0.0.1:9200",
        "bulk_limit": 6000,
        "region": "eu-west-1",
    },
}

KNOWN_ENVIRONMENTS = frozenset(_ENVIRONMENT_DEFAULTS)
_ENV_FILENAMES = (".env", ".env.local")


def _parse_env_line(raw_line: str) -> tuple[str, str] | None:
    line = raw_line.strip()
    if not line or line.startswith("#") or "=" not in line:
        return None
    if line.startswith("export "):
        line = line[len("export "):].lstrip()

    key, value = (part.strip() for part in line.split("=", 1))
    if not key:
        return None
    return key, value.strip('"').strip("'")


def load_env_files(project_root: Path | None = None) -> None:
    """
    Seed the process environment from `.env` then `.env.local` under the
    project root. Variables already set in the process always win.
    """

    root = project_root or Path(__file__).resolve().parents[1]
    for env_path in (root / filename for filename in _ENV_FILENAMES):
        if not env_path.is_file():
            continue
        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            parsed = _parse_env_line(raw_line)
            if parsed is not None:
                os.environ.setdefault(*parsed)


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    load_env_files()


def _read_env(environment: str, name: str) -> str | None:
    """
    Return `<ENV>_<NAME>` when set, otherwise `<NAME>`, ignoring blank values.
    """

    _load_env_once()
    for candidate in (f"{environment}_{name}", name):
        value = os.getenv(candidate)
        if value is not None and value.strip():
            return value.strip()
    return None


def _get_bool_env(environment: str, name: str, default: bool) -> bool:
    raw_value = _read_env(environment, name)
    if raw_value is None:
        return default
    return raw_value.lower() in {"1", "true", "yes", "on"}


def _get_int_env(environment: str, name: str, default: int) -> int:
    raw_value = _read_env(environment, name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(environment: str, name: str, default: float) -> float:
    raw_value = _read_env(environment, name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(environment: str, name: str, default: str) -> str:
    value = _read_env(environment, name)
    return value if value is not None else default


def resolve_environment_name(function_arn: str | None = None) -> str:
    """
    Derive the deployment environment from an invoked function ARN.

    The alias (last `:` segment) selects the environment when it names a
    known one, e.g. `arn:aws:lambda:eu-west-1:123:function:elb-logs:LIVE`.
    Unqualified ARNs fall back to DEPLOY_ENVIRONMENT, then LOCAL.
    """

    if function_arn:
        alias = function_arn.rsplit(":", 1)[-1].strip().upper()
        if alias in KNOWN_ENVIRONMENTS:
            return alias

    _load_env_once()
    fallback = (os.getenv("DEPLOY_ENVIRONMENT") or DEFAULT_ENVIRONMENT).strip().upper()
    if fallback not in KNOWN_ENVIRONMENTS:
        raise RuntimeError(
            f"DEPLOY_ENVIRONMENT '{fallback}' is not valid. "
            f"Allowed values: {sorted(KNOWN_ENVIRONMENTS)}."
        )
    return fallback


@dataclass(frozen=True)
class IngestionSettings:
    """
    Runtime settings for one deployment environment.
    """

    environment: str
    debug: bool
    elk_url: str
    bulk_limit: int
    region: str
    aws_access_key_id: str | None = None
    aws_secret_access_key: str | None = None
    index_prefix: str = "logstash"
    document_type: str = "elblog"
    elk_username: str | None = None
    elk_password: str | None = None
    http_timeout_seconds: float = 30.0
    bulk_max_retries: int = 0
    backoff_initial_seconds: float = 0.5
    backoff_multiplier: float = 2.0
    low_budget_ms: int = 1000
    budget_initial_delay_ms: int = 500
    budget_check_interval_lines: int = 100
    truncate_on_low_budget: bool = True
    request_budget_seconds: float = 300.0

    @property
    def has_static_credentials(self) -> bool:
        return bool(self.aws_access_key_id and self.aws_secret_access_key)


@lru_cache(maxsize=8)
def get_ingestion_settings(environment: str = DEFAULT_ENVIRONMENT) -> IngestionSettings:
    """
    Resolve and cache settings for one environment.

    Raises RuntimeError for unknown environments, or when no ELK URL is
    configured outside LOCAL.
    """

    env = environment.strip().upper()
    defaults = _ENVIRONMENT_DEFAULTS.get(env)
    if defaults is None:
        raise RuntimeError(
            f"Unknown environment '{environment}'. Allowed values: {sorted(KNOWN_ENVIRONMENTS)}."
        )

    elk_url = _read_env(env, "ELK_URL") or defaults["elk_url"]
    if not elk_url:
        raise RuntimeError(f"ELK_URL must be set for environment '{env}' (or {env}_ELK_URL).")

    # "none" drops the mapping type for backends that reject `_type`.
    document_type = _get_str_env(env, "ELK_DOCUMENT_TYPE", "elblog")
    if document_type.lower() == "none":
        document_type = ""

    return IngestionSettings(
        environment=env,
        debug=_get_bool_env(env, "DEBUG", bool(defaults["debug"])),
        elk_url=str(elk_url).rstrip("/"),
        bulk_limit=max(1, _get_int_env(env, "BULK_LIMIT", int(defaults["bulk_limit"]))),
        region=_get_str_env(env, "AWS_S3_REGION", str(defaults["region"])),
        aws_access_key_id=_read_env(env, "AWS_S3_ACCESS_KEY_ID"),
        aws_secret_access_key=_read_env(env, "AWS_S3_SECRET_ACCESS_KEY"),
        index_prefix=_get_str_env(env, "ELK_INDEX_PREFIX", "logstash"),
        document_type=document_type,
        elk_username=_read_env(env, "ELK_USERNAME"),
        elk_password=_read_env(env, "ELK_PASSWORD"),
        http_timeout_seconds=max(1.0, _get_float_env(env, "ELK_HTTP_TIMEOUT_SECONDS", 30.0)),
        bulk_max_retries=max(0, _get_int_env(env, "ELK_BULK_MAX_RETRIES", 0)),
        backoff_initial_seconds=max(0.1, _get_float_env(env, "ELK_BACKOFF_INITIAL_SECONDS", 0.5)),
        backoff_multiplier=max(1.0, _get_float_env(env, "ELK_BACKOFF_MULTIPLIER", 2.0)),
        low_budget_ms=max(0, _get_int_env(env, "LOW_BUDGET_MS", 1000)),
        budget_initial_delay_ms=max(0, _get_int_env(env, "BUDGET_INITIAL_DELAY_MS", 500)),
        budget_check_interval_lines=max(1, _get_int_env(env, "BUDGET_CHECK_INTERVAL_LINES", 100)),
        truncate_on_low_budget=_get_bool_env(env, "TRUNCATE_ON_LOW_BUDGET", True),
        request_budget_seconds=max(1.0, _get_float_env(env, "REQUEST_BUDGET_SECONDS", 300.0)),
    )
