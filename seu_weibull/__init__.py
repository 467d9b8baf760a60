"""Automated Weibull fitting and validation of SEU cross-section test data."""

from seu_weibull.models import Observation, WeibullParameters
from seu_weibull.pipeline import PipelineResult, run_validation_pipeline
from seu_weibull.schema.run_config import PipelineConfig

__all__ = ["Observation", "PipelineConfig", "PipelineResult", "WeibullParameters", "run_validation_pipeline"]
