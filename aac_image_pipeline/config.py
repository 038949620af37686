"""
Configuration manager - loads settings from the environment and .env files
"""

import logging
import os
from pathlib import Path
from typing import List, Mapping, Optional, Sequence

from dotenv import dotenv_values

from .exceptions import ConfigurationError
from .models import PipelineConfig

logger = logging.getLogger(__name__)

DEFAULT_ENV_FILES = (".env.local", ".env")

GENAI_KEY_VARS = ("GOOGLE_GENAI_API_KEY",)
SUPABASE_URL_VARS = ("NEXT_PUBLIC_SUPABASE_URL", "SUPABASE_URL")
# Service role key first: it bypasses row level security
SERVICE_ROLE_KEY_VARS = ("SUPABASE_SERVICE_ROLE_KEY", "SERVICE_ROLE_KEY")
ANON_KEY_VARS = ("NEXT_PUBLIC_SUPABASE_ANON_KEY",)


class ConfigManager:
    """Configuration manager"""

    def __init__(
        self,
        project_root: Optional[Path] = None,
        env_files: Optional[Sequence[str]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        """
        Args:
            project_root: directory the env files are looked up in (default: cwd)
            env_files: env file names, earlier files win over later ones
            environ: process environment (default: os.environ); always wins over files
        """
        self.project_root = project_root or Path.cwd()
        self.env_files = DEFAULT_ENV_FILES if env_files is None else tuple(env_files)
        self.environ = os.environ if environ is None else environ
        self._values: Optional[dict] = None
        self._config: Optional[PipelineConfig] = None

    def _load_values(self) -> dict:
        """Merge env files and the process environment"""
        if self._values is not None:
            return self._values

        values = {}
        # Later files are applied first so earlier ones override them
        for name in reversed(self.env_files):
            path = self.project_root / name
            if path.exists():
                logger.debug(f"Loading env file: {path}")
                values.update({k: v for k, v in dotenv_values(path).items() if v is not None})

        values.update(self.environ)
        self._values = values
        return values

    def _first(self, names: Sequence[str]) -> str:
        values = self._load_values()
        for name in names:
            value = (values.get(name) or "").strip()
            if value:
                return value
        return ""

    def missing_variables(self) -> List[str]:
        """Return the required variables (or variable groups) that are not set"""
        missing = []
        if not self._first(GENAI_KEY_VARS):
            missing.append(GENAI_KEY_VARS[0])
        if not self._first(SUPABASE_URL_VARS):
            missing.append(" or ".join(SUPABASE_URL_VARS))
        if not self._first(SERVICE_ROLE_KEY_VARS + ANON_KEY_VARS):
            missing.append(" or ".join(SERVICE_ROLE_KEY_VARS + ANON_KEY_VARS))
        return missing

    def load_config(self, output_dir: Optional[Path] = None) -> PipelineConfig:
        """
        Build the pipeline configuration

        Args:
            output_dir: overrides AAC_OUTPUT_DIR

        Raises:
            ConfigurationError: a required variable is missing
        """
        if self._config and output_dir is None:
            return self._config

        missing = self.missing_variables()
        if missing:
            raise ConfigurationError(
                "Missing required environment variables: " + ", ".join(missing),
                field=missing[0],
            )

        service_key = self._first(SERVICE_ROLE_KEY_VARS)
        if not service_key:
            logger.warning("⚠️ No service role key set, using the anon key (row level security applies)")

        values = self._load_values()
        self._config = PipelineConfig(
            genai_api_key=self._first(GENAI_KEY_VARS),
            supabase_url=self._first(SUPABASE_URL_VARS).rstrip("/"),
            supabase_key=service_key or self._first(ANON_KEY_VARS),
            using_service_role=bool(service_key),
            gemini_model=values.get("AAC_GEMINI_MODEL") or "gemini-2.5-flash-image",
            bucket_name=values.get("AAC_STORAGE_BUCKET") or "emotion-emojis",
            cards_table=values.get("AAC_CARDS_TABLE") or "aac_master_cards",
            categories_table=values.get("AAC_CATEGORIES_TABLE") or "aac_master_categories",
            output_dir=Path(output_dir or values.get("AAC_OUTPUT_DIR") or "./generated-images"),
        )
        return self._config
