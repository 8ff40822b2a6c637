"""
Configuration management and loading.

Handles pricing tiers, image analysis settings and report defaults.
"""

import os
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from framecount.core.pricing import DEFAULT_TIERS, PricingTier

DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_REPORT_TITLE = "Estimasi Biaya Shot LOM"
API_KEY_ENV = "OPENAI_API_KEY"


@dataclass(frozen=True)
class AnalysisSettings:
    """Image analysis settings, decided once at startup."""
    enabled: bool
    model: str = DEFAULT_MODEL

    def __post_init__(self):
        """Validate the model name."""
        if not self.model or not self.model.strip():
            raise ValueError("analysis model cannot be empty")


@dataclass(frozen=True)
class ReportDefaults:
    """Default presentation values for exported reports."""
    title: str = DEFAULT_REPORT_TITLE
    author: str = ""
    notes: str = ""


@dataclass(frozen=True)
class Settings:
    """Complete application configuration."""
    tiers: List[PricingTier]
    analysis: AnalysisSettings
    report: ReportDefaults = field(default_factory=ReportDefaults)


def default_settings() -> Settings:
    """Settings used when no configuration file is given."""
    return Settings(
        tiers=list(DEFAULT_TIERS),
        analysis=AnalysisSettings(enabled=bool(os.environ.get(API_KEY_ENV))),
        report=ReportDefaults(),
    )


def load_settings(path: Optional[str] = None) -> Settings:
    """Load and validate configuration from a YAML file.

    Every section is optional. Missing sections fall back to the
    default tiers, analysis enabled only when an OpenAI API key is
    present in the environment, and the default report title.

    Args:
        path: Path to YAML configuration file, or None for defaults

    Returns:
        Validated Settings object

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is invalid
        ValueError: If configuration is invalid
    """
    if path is None:
        return default_settings()

    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        try:
            raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Invalid YAML in config file {path}: {e}")

    if not raw_config:
        raise ValueError("Configuration file is empty")
    if not isinstance(raw_config, dict):
        raise ValueError("Configuration must be a mapping")

    allowed_top_keys = {'tiers', 'analysis', 'report'}
    unknown_keys = set(raw_config.keys()) - allowed_top_keys
    if unknown_keys:
        raise ValueError(f"Unknown configuration keys: {unknown_keys}")

    defaults = default_settings()

    tiers = defaults.tiers
    if 'tiers' in raw_config:
        tiers = parse_tiers(raw_config['tiers'])

    analysis = defaults.analysis
    if 'analysis' in raw_config:
        analysis = _parse_analysis(raw_config['analysis'], defaults.analysis)

    report = defaults.report
    if 'report' in raw_config:
        report = _parse_report(raw_config['report'])

    return Settings(tiers=tiers, analysis=analysis, report=report)


def parse_tiers(data: Any) -> List[PricingTier]:
    """Parse and validate an ordered list of pricing tiers.

    Overlapping or gapped tiers are accepted as-is; the first matching
    tier wins at pricing time.

    Raises:
        ValueError: If the list or any tier is invalid
    """
    if not isinstance(data, list):
        raise ValueError("'tiers' must be a list")

    tiers = []
    for index, tier_data in enumerate(data):
        path = f"tiers[{index}]"
        if not isinstance(tier_data, dict):
            raise ValueError(f"{path} must be a dictionary")

        allowed_keys = {'label', 'min', 'max', 'price'}
        unknown_keys = set(tier_data.keys()) - allowed_keys
        if unknown_keys:
            raise ValueError(f"Unknown keys in {path}: {unknown_keys}")
        for key in ('label', 'min', 'max', 'price'):
            if key not in tier_data:
                raise ValueError(f"Missing required '{key}' in {path}")

        label = tier_data['label']
        if not isinstance(label, str) or not label.strip():
            raise ValueError(f"'label' in {path} must be a non-empty string")

        for key in ('min', 'max'):
            value = tier_data[key]
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"'{key}' in {path} must be an integer")

        price = _parse_price(tier_data['price'], path)

        try:
            tiers.append(PricingTier(
                min=tier_data['min'],
                max=tier_data['max'],
                price=price,
                label=label,
            ))
        except ValueError as e:
            raise ValueError(f"Invalid tier {path}: {e}")

    return tiers


def _parse_price(value: Any, path: str) -> Decimal:
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise ValueError(f"'price' in {path} must be a number")
    try:
        price = Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"'price' in {path} must be a number")
    if not price.is_finite():
        raise ValueError(f"'price' in {path} must be finite")
    return price


def _parse_analysis(data: Any, defaults: AnalysisSettings) -> AnalysisSettings:
    if not isinstance(data, dict):
        raise ValueError("'analysis' must be a dictionary")

    allowed_keys = {'enabled', 'model'}
    unknown_keys = set(data.keys()) - allowed_keys
    if unknown_keys:
        raise ValueError(f"Unknown keys in analysis: {unknown_keys}")

    enabled = data.get('enabled', defaults.enabled)
    if not isinstance(enabled, bool):
        raise ValueError("'enabled' in analysis must be a boolean")

    model = data.get('model', defaults.model)
    if not isinstance(model, str):
        raise ValueError("'model' in analysis must be a string")

    return AnalysisSettings(enabled=enabled, model=model)


def _parse_report(data: Any) -> ReportDefaults:
    if not isinstance(data, dict):
        raise ValueError("'report' must be a dictionary")

    allowed_keys = {'title', 'author', 'notes'}
    unknown_keys = set(data.keys()) - allowed_keys
    if unknown_keys:
        raise ValueError(f"Unknown keys in report: {unknown_keys}")

    values: Dict[str, str] = {}
    for key in allowed_keys:
        if key in data:
            value = data[key]
            if value is None:
                value = ""
            if not isinstance(value, str):
                raise ValueError(f"'{key}' in report must be a string")
            values[key] = value

    if 'title' in values and not values['title'].strip():
        raise ValueError("'title' in report cannot be empty")

    return ReportDefaults(**values)
