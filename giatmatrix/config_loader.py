"""giatmatrix.config_loader

Config loader for giatmatrix.

- Reads YAML (JSON files parse too, being valid YAML).
- Environment variables override file values.
- Exposes a typed dataclass `Config` and a `load_config()` helper that accepts
  an optional path override.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .attachment_reconciler import (
    DEFAULT_ATTACHMENT_KEYWORD,
    DEFAULT_STORAGE_HOST,
    AttachmentReconciler,
)
from .matrix_datetime_utils import DEFAULT_MATRIX_TIMEZONE, DEFAULT_SHEET_PREFIX, get_zone
from .models import MatrixLayout

logger = logging.getLogger(__name__)

ENV_SHEET_ID = "GIATMATRIX_SHEET_ID"
ENV_TIMEZONE = "GIATMATRIX_TIMEZONE"
ENV_LOG_LEVEL = "GIATMATRIX_LOG_LEVEL"

_LAYOUT_KEYS = ("header_row", "first_column", "last_column", "first_data_row", "last_data_row")


@dataclass
class Config:
    """Typed configuration for giatmatrix.

    Fields:
        spreadsheet_id: key of the activity-matrix spreadsheet
        timezone: IANA zone in which event dates are resolved
        sheet_prefix: month sheet prefix (``Giat`` -> ``Giat_Agustus_24``)
        storage_host: host token marking links as stored files
        attachment_keyword: link text marking anchors as attachments
        include_bare_links: also treat plain-text storage URLs as attachments
        tag_event_ids: append ``eventId:<id>`` to written cells
        log_level: logging level name
        layout: overrides for MatrixLayout geometry fields
    """

    spreadsheet_id: str | None = None
    timezone: str = DEFAULT_MATRIX_TIMEZONE
    sheet_prefix: str = DEFAULT_SHEET_PREFIX
    storage_host: str = DEFAULT_STORAGE_HOST
    attachment_keyword: str = DEFAULT_ATTACHMENT_KEYWORD
    include_bare_links: bool = True
    tag_event_ids: bool = False
    log_level: str = "INFO"
    layout: dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> Config:
        """Create Config from a plain mapping, applying defaults and validation.

        Layout values that are not integers are dropped with a warning; an
        unknown timezone keeps the default.
        """
        if data is None:
            data = {}

        def _coerce_bool(key: str, default: bool) -> bool:
            raw = data.get(key, default)
            if isinstance(raw, bool):
                return raw
            if isinstance(raw, str):
                return raw.strip().lower() in ("1", "true", "yes", "on")
            if isinstance(raw, (int, float)):
                return bool(raw)
            logger.warning("Config %s=%r is not a bool; using default %s", key, raw, default)
            return default

        layout_raw = data.get("layout") or {}
        if not isinstance(layout_raw, dict):
            logger.warning("Config `layout` is not a mapping; ignoring")
            layout_raw = {}
        layout: dict[str, int] = {}
        for key in _LAYOUT_KEYS:
            if key not in layout_raw:
                continue
            try:
                layout[key] = int(layout_raw[key])
            except (TypeError, ValueError):
                logger.warning("Config layout.%s=%r is not an int; ignoring", key, layout_raw[key])

        timezone = str(data.get("timezone") or DEFAULT_MATRIX_TIMEZONE)
        if get_zone(timezone).key != timezone:
            timezone = DEFAULT_MATRIX_TIMEZONE

        spreadsheet_id = data.get("spreadsheet_id")
        log_level = data.get("log_level", "INFO")

        return cls(
            spreadsheet_id=str(spreadsheet_id) if spreadsheet_id else None,
            timezone=timezone,
            sheet_prefix=str(data.get("sheet_prefix") or DEFAULT_SHEET_PREFIX),
            storage_host=str(data.get("storage_host") or DEFAULT_STORAGE_HOST),
            attachment_keyword=str(data.get("attachment_keyword") or DEFAULT_ATTACHMENT_KEYWORD),
            include_bare_links=_coerce_bool("include_bare_links", True),
            tag_event_ids=_coerce_bool("tag_event_ids", False),
            log_level=str(log_level).upper() if log_level is not None else "INFO",
            layout=layout,
        )

    def apply_env(self, environ: dict[str, str] | None = None) -> Config:
        """Override fields from GIATMATRIX_* environment variables in place."""
        env = os.environ if environ is None else environ
        if env.get(ENV_SHEET_ID):
            self.spreadsheet_id = env[ENV_SHEET_ID]
        if env.get(ENV_TIMEZONE):
            zone = env[ENV_TIMEZONE]
            if get_zone(zone).key == zone:
                self.timezone = zone
        if env.get(ENV_LOG_LEVEL):
            self.log_level = env[ENV_LOG_LEVEL].upper()
        return self

    def build_layout(self) -> MatrixLayout:
        """Return the MatrixLayout described by this config.

        Raises:
            ValueError: If the layout overrides are inconsistent
        """
        try:
            return MatrixLayout(tag_event_ids=self.tag_event_ids, **self.layout)
        except ValidationError as exc:
            raise ValueError(f"Invalid matrix layout in config: {exc}") from exc

    def build_reconciler(self) -> AttachmentReconciler:
        return AttachmentReconciler(
            storage_host=self.storage_host,
            keyword=self.attachment_keyword,
            include_bare_links=self.include_bare_links,
        )


def _load_yaml(path: Path) -> Any:
    """Load a YAML (or JSON) document; empty files yield an empty mapping."""
    loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
    if loaded is None:
        return {}
    return loaded


def load_config(path: str | None = None, environ: dict[str, str] | None = None) -> Config:
    """Load configuration from a YAML file and return a Config instance.

    Args:
        path: Optional path to the config file. Defaults to ./giatmatrix.yaml.
        environ: Environment mapping for overrides (os.environ if None)

    Returns:
        Config dataclass instance with values from file (or defaults).

    Behavior:
    - If file is missing: returns defaults (plus environment overrides).
    - If file exists but top-level is not a mapping: raises ValueError.
    """
    p = Path(path) if path else Path.cwd() / "giatmatrix.yaml"
    logger.debug("Attempting to load config from %s", p)
    if not p.exists():
        logger.info("Config file %s not found; using defaults", p)
        return Config().apply_env(environ)

    raw = _load_yaml(p)
    if not isinstance(raw, dict):
        logger.warning("Config file %s parsed but top-level is not a mapping: %r", p, raw)
        raise ValueError("Config file must contain a mapping at top level")  # noqa: TRY004
    cfg = Config.from_dict(raw).apply_env(environ)
    logger.info("Loaded configuration from %s", p)
    logger.debug("Configuration values: %s", cfg)
    return cfg
