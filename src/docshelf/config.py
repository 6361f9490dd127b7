"""Configuration system using platformdirs for cross-platform paths."""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

import platformdirs

APP_NAME = "docshelf"
APP_AUTHOR = "docshelf"


def _env_flag(value: str) -> bool:
	return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Config:
	"""Central configuration with XDG/platform conventions."""

	config_dir: Path = field(default_factory=lambda: Path(platformdirs.user_config_dir(APP_NAME)))
	data_dir: Path = field(default_factory=lambda: Path(platformdirs.user_data_dir(APP_NAME)))

	# Derived paths
	global_docs_dir: Path = field(init=False)
	records_db_path: Path = field(init=False)
	log_dir: Path = field(init=False)

	# User-configurable
	project_dir_name: str = ".docshelf"
	use_global_directory: bool = False
	stale_after_days: int = 7
	scrape_timeout: int = 30
	max_content_length: int = 1_000_000
	user_agent: str = "Mozilla/5.0 (compatible; docshelf/0.3)"
	log_level: str = "INFO"

	def __post_init__(self) -> None:
		self.global_docs_dir = self.data_dir / "global-docs"
		self.records_db_path = self.data_dir / "records.db"
		self.log_dir = self.data_dir / "logs"

	def project_docs_dir(self, working_directory: str | Path) -> Path:
		"""Resolve where the project tier lives for a working directory."""
		if self.use_global_directory:
			return self.data_dir / "docs"
		return Path(working_directory).expanduser() / self.project_dir_name / "docs"

	def ensure_dirs(self) -> None:
		"""Create all required directories."""
		self.config_dir.mkdir(parents=True, exist_ok=True)
		self.data_dir.mkdir(parents=True, exist_ok=True)
		self.log_dir.mkdir(parents=True, exist_ok=True)


def _apply_env_overrides(config: Config) -> Config:
	"""Apply DOCSHELF_* environment variable overrides."""
	path_map = {
		"DOCSHELF_CONFIG_DIR": "config_dir",
		"DOCSHELF_DATA_DIR": "data_dir",
	}
	for env_key, attr in path_map.items():
		val = os.getenv(env_key)
		if val:
			setattr(config, attr, Path(val))

	use_global = os.getenv("DOCSHELF_USE_GLOBAL_DIRECTORY")
	if use_global:
		config.use_global_directory = _env_flag(use_global)

	stale_days = os.getenv("DOCSHELF_STALE_AFTER_DAYS")
	if stale_days:
		config.stale_after_days = int(stale_days)

	log_level = os.getenv("DOCSHELF_LOG_LEVEL")
	if log_level:
		config.log_level = log_level

	# Recompute derived paths after overrides
	config.__post_init__()
	return config


def _apply_toml(config: Config) -> Config:
	"""Apply config.toml overrides if file exists."""
	toml_path = config.config_dir / "config.toml"
	if not toml_path.exists():
		return config

	with open(toml_path, "rb") as f:
		data = tomllib.load(f)

	path_fields = {"config_dir", "data_dir"}
	for key, val in data.items():
		if hasattr(config, key):
			if key in path_fields:
				setattr(config, key, Path(os.path.expanduser(val)))
			else:
				setattr(config, key, val)

	# Recompute derived paths after toml overrides
	config.__post_init__()
	return config


def load_config() -> Config:
	"""Load config with precedence: env vars > config.toml > defaults."""
	config = Config()
	config = _apply_env_overrides(config)
	config = _apply_toml(config)
	config = _apply_env_overrides(config)
	config.ensure_dirs()
	return config


# Singleton
_config: Config | None = None


def get_config() -> Config:
	"""Get or create the global config instance."""
	global _config
	if _config is None:
		_config = load_config()
	return _config
