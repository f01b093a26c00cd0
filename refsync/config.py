"""Runtime configuration — env-driven, pipeline-agent aware.

Centralized settings using pydantic-settings.  Reads ``REFSYNC_*``
environment variables and a ``.env`` file, and falls back to the variables
the pipeline agent exports for every job (collection URL, project id and
the job access token).
"""

from __future__ import annotations

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class InvalidConfigurationError(RuntimeError):
    """Raised when inputs or settings cannot be used as given.

    Covers invalid search patterns or flags, missing required task inputs
    and missing connection settings.  Always fatal for the invocation.
    """


# Release-management hosts serve the release APIs only; git and build
# requests must go to the collection host.
_RELEASE_HOST_REWRITES: tuple[tuple[str, str], ...] = (
    (".vsrm.visualstudio.com", ".visualstudio.com"),
    ("://vsrm.dev.azure.com", "://dev.azure.com"),
)


class RefSyncSettings(BaseSettings):
    """Connection and logging settings.

    Examples
    --------
    Override via environment::

        export REFSYNC_COLLECTION_URL=https://dev.azure.com/contoso/
        export REFSYNC_PROJECT=Fabrikam
        export REFSYNC_ACCESS_TOKEN=...
        export REFSYNC_LOG_LEVEL=DEBUG

    Inside a pipeline job the agent's ``SYSTEM_TEAMFOUNDATIONCOLLECTIONURI``,
    ``SYSTEM_TEAMPROJECTID`` and ``SYSTEM_ACCESSTOKEN`` are picked up
    automatically.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="REFSYNC_",
        env_file_encoding="utf-8",
        populate_by_name=True,
        extra="ignore",
    )

    log_level: str = "INFO"

    collection_url: str = Field(
        default="",
        validation_alias=AliasChoices(
            "REFSYNC_COLLECTION_URL", "SYSTEM_TEAMFOUNDATIONCOLLECTIONURI"
        ),
    )
    project: str = Field(
        default="",
        validation_alias=AliasChoices("REFSYNC_PROJECT", "SYSTEM_TEAMPROJECTID"),
    )
    access_token: str = Field(
        default="",
        validation_alias=AliasChoices("REFSYNC_ACCESS_TOKEN", "SYSTEM_ACCESSTOKEN"),
    )

    api_version: str = "6.0"
    request_timeout: float = 30.0

    @property
    def api_base_url(self) -> str:
        """Collection URL without trailing slash, on the collection host."""
        url = self.collection_url
        for old, new in _RELEASE_HOST_REWRITES:
            url = url.replace(old, new)
        return url.rstrip("/")

    def require_connection(self) -> None:
        """Fail hard when the REST client cannot be built from these settings."""
        missing = [
            name
            for name, value in (
                ("collection_url", self.collection_url),
                ("access_token", self.access_token),
            )
            if not value
        ]
        if missing:
            raise InvalidConfigurationError(
                f"Missing connection settings: {', '.join(missing)}. "
                "Set REFSYNC_* variables or run inside a pipeline job with "
                "access to the OAuth token."
            )
