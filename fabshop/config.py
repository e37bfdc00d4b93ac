from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

import streamlit as st

CONFIG_FILE_NAME = "settings.json"
ENV_DATA_DIR = "FABSHOP_DATA_DIR"
ENV_LOG_LEVEL = "FABSHOP_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    db_path: Path
    currency: str = "USD"
    log_level: str = "INFO"


def _default_data_dir() -> Path:
    return Path.home() / ".fabshop"


def _load_persisted_settings(data_dir: Path) -> dict:
    cfg = data_dir / CONFIG_FILE_NAME
    if not cfg.exists():
        return {}
    try:
        return json.loads(cfg.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning("Ignoring unreadable %s: %s", cfg, e)
        return {}


def persist_data_dir(data_dir_str: str) -> None:
    data_dir = Path(data_dir_str).expanduser().resolve()
    data_dir.mkdir(parents=True, exist_ok=True)

    # Written to the default folder so the choice survives a restart.
    default_dir = _default_data_dir()
    default_dir.mkdir(parents=True, exist_ok=True)
    cfg = default_dir / CONFIG_FILE_NAME
    payload = {**_load_persisted_settings(default_dir), "data_dir": str(data_dir)}
    cfg.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    # Update session for immediate effect
    st.session_state["fabshop_data_dir"] = str(data_dir)
    logger.info("Data directory set to %s", data_dir)


def configure_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    if not any(h.get_name() == "fabshop" for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler.set_name("fabshop")
        root.addHandler(handler)
    logging.getLogger("fabshop").setLevel(level.upper())


@st.cache_resource
def get_settings() -> Settings:
    # Priority order:
    # 1) Session state (set via Data Management page)
    # 2) Environment variable
    # 3) Persisted settings in default folder
    # 4) Default folder
    default_dir = _default_data_dir()
    persisted = _load_persisted_settings(default_dir)

    if "fabshop_data_dir" in st.session_state:
        data_dir = Path(st.session_state["fabshop_data_dir"]).expanduser().resolve()
    elif os.getenv(ENV_DATA_DIR):
        data_dir = Path(os.getenv(ENV_DATA_DIR, "")).expanduser().resolve()
    else:
        data_dir = Path(persisted.get("data_dir", default_dir)).expanduser().resolve()

    data_dir.mkdir(parents=True, exist_ok=True)
    settings = Settings(
        data_dir=data_dir,
        db_path=data_dir / "fabshop.db",
        currency=str(persisted.get("currency", "USD")),
        log_level=os.getenv(ENV_LOG_LEVEL, str(persisted.get("log_level", "INFO"))),
    )
    configure_logging(settings.log_level)
    return settings
