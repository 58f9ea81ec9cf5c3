"""
Feature manager for the tlm2api daemon.

Features (line sources and other background services) are registered here,
enabled/disabled via environment variables, and started/stopped together
with the FastAPI application.
"""

import logging
import os
from typing import Dict, Optional

from tlm_daemon.config import get_line_source_config

from .feature_base import Feature
from .line_source import LineSourceFeature

logger = logging.getLogger(__name__)


_registered_features: Dict[str, Feature] = {}


def register_feature(feature: Feature):
    """Register a feature instance, replacing any feature with the same name."""
    _registered_features[feature.name] = feature
    logger.info(f"Registered feature: {feature.name} (enabled={feature.enabled})")


def get_feature(name: str) -> Optional[Feature]:
    return _registered_features.get(name)


def get_enabled_features() -> Dict[str, Feature]:
    return {k: v for k, v in _registered_features.items() if v.enabled}


def get_all_features() -> Dict[str, Feature]:
    return dict(_registered_features)


async def startup_all():
    for feature in get_enabled_features().values():
        logger.info(f"Starting feature: {feature.name}")
        await feature.startup()


async def shutdown_all():
    for feature in get_enabled_features().values():
        logger.info(f"Shutting down feature: {feature.name}")
        await feature.shutdown()


# --- Feature Registration Section ---
register_feature(
    LineSourceFeature(
        name="line_source",
        enabled=os.getenv("ENABLE_LINE_SOURCE", "1") == "1",
        core=True,
        config=get_line_source_config(),
    )
)
