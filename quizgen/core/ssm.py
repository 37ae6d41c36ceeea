"""
Loads quizgen settings from AWS Systems Manager Parameter Store.

Enabled with USE_PARAMETER_STORE=true. Every parameter under
``/quizgen/<QUIZGEN_ENV>/`` is read in one paginated walk and the known ones
are copied into os.environ, where ``Settings`` picks them up. Values already
present in the environment win unless SSM_OVERRIDE_ENV=true.
"""

import logging
import os

logger = logging.getLogger(__name__)

# parameter leaf name -> environment variable read by Settings
_PARAM_MAP: dict[str, str] = {
    # storage
    "QUIZ_DB_URL": "DB_URL",
    # AI gateway
    "AI_PROVIDER": "AI_PROVIDER",
    "AI_TEMPERATURE": "AI_TEMPERATURE",
    "AI_MAX_TOKENS": "AI_MAX_TOKENS",
    "AI_TIMEOUT_SECONDS": "AI_TIMEOUT_SECONDS",
    "GROQ_API_KEY": "GROQ_API_KEY",
    "GROQ_BASE_URL": "GROQ_BASE_URL",
    "GROQ_MODEL": "GROQ_MODEL",
    "GEMINI_API_KEY": "GEMINI_API_KEY",
    "GEMINI_MODEL": "GEMINI_MODEL",
    "GEMINI_MODEL_PREFERRED": "GEMINI_MODEL_PREFERRED",
    # client retrieval policy
    "QUIZ_API_BASE_URL": "QUIZ_API_BASE_URL",
    "QUIZ_POLL_INTERVAL_SECONDS": "QUIZ_POLL_INTERVAL_SECONDS",
    "QUIZ_POLL_MAX_ATTEMPTS": "QUIZ_POLL_MAX_ATTEMPTS",
    "QUIZ_GENERATE_TIMEOUT_SECONDS": "QUIZ_GENERATE_TIMEOUT_SECONDS",
}


def parameter_prefix() -> str:
    return f"/quizgen/{os.getenv('QUIZGEN_ENV', 'dev')}"


def _iter_parameters(client, prefix: str):
    paginator = client.get_paginator("get_parameters_by_path")
    for page in paginator.paginate(Path=prefix, Recursive=False, WithDecryption=True):
        yield from page.get("Parameters", [])


def load_ssm_parameters(client=None) -> dict[str, str]:
    """Copy quizgen parameters into os.environ; returns the env keys that were set."""
    if os.getenv("USE_PARAMETER_STORE", "").lower() != "true":
        logger.info("USE_PARAMETER_STORE is not set; skipping SSM loading")
        return {}

    if client is None:
        try:
            import boto3
        except ImportError:
            logger.warning("boto3 is not installed (pip install quizgen[aws]); skipping SSM loading")
            return {}
        client = boto3.client("ssm", region_name=os.getenv("AWS_REGION", "ap-southeast-1"))

    prefix = parameter_prefix()
    override = os.getenv("SSM_OVERRIDE_ENV", "").lower() == "true"
    applied: dict[str, str] = {}
    unknown = 0

    try:
        for param in _iter_parameters(client, prefix):
            leaf = param["Name"].rsplit("/", 1)[-1]
            env_key = _PARAM_MAP.get(leaf)
            if env_key is None:
                unknown += 1
                continue
            if env_key in os.environ and not override:
                logger.debug("Keeping %s from environment over SSM %s", env_key, param["Name"])
                continue
            os.environ[env_key] = param["Value"]
            applied[env_key] = param["Name"]
    except Exception:
        logger.warning("Failed to read SSM parameters under %s", prefix, exc_info=True)
        return applied

    logger.info(
        "SSM parameters applied",
        extra={"prefix": prefix, "applied": len(applied), "ignored": unknown},
    )
    return applied
