import os
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from ._utils.constants import (
    DEFAULT_TIMEOUT,
    DOTENV_FILE,
    ENV_BASE_URL,
    ENV_FOLLOW_REDIRECTS,
    ENV_TIMEOUT,
    ENV_VERIFY_SSL,
)


class Config(BaseModel):
    base_url: Optional[str] = None
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    follow_redirects: bool = True
    verify_ssl: bool = True
    default_headers: dict[str, str] = Field(default_factory=dict)

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: Optional[str]) -> Optional[str]:
        if value is None or value.strip() == "":
            return None
        return value.rstrip("/")


_ENV_FIELDS = {
    ENV_BASE_URL: "base_url",
    ENV_TIMEOUT: "timeout",
    ENV_FOLLOW_REDIRECTS: "follow_redirects",
    ENV_VERIFY_SSL: "verify_ssl",
}


def load_config(dotenv_path: Optional[str] = None, **overrides: Any) -> Config:
    """Build a :class:`Config` from the environment.

    A ``.env`` file is loaded first (without overriding variables that are
    already set), then the ``RESTASSURED_*`` variables are read. Keyword
    arguments win over both.

    Args:
        dotenv_path: Path of the dotenv file. Defaults to ``.env`` in the
            current working directory.
        **overrides: Field values that take precedence over the environment.

    Returns:
        Config: The validated configuration.

    Raises:
        pydantic.ValidationError: If a variable holds an invalid value.
    """
    load_dotenv(
        dotenv_path=dotenv_path or os.path.join(os.getcwd(), DOTENV_FILE),
        override=False,
    )

    values: dict[str, Any] = {}
    for env_var, field_name in _ENV_FIELDS.items():
        value = os.environ.get(env_var)
        if value is not None and value != "":
            values[field_name] = value

    values.update(overrides)
    return Config(**values)
