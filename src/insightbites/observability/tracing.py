"""MLflow tracing setup for the CLI and the API.

Dataset requests and strategy fetches open spans with
`mlflow.start_span(...)`; this module only points MLflow at the
configured tracking store and experiment before the first span.
"""

import logging

import mlflow

from insightbites.config import Settings, settings

logger = logging.getLogger(__name__)


def init_tracing(config: Settings = settings) -> None:
    """Point MLflow tracing at the configured tracking server and experiment."""
    mlflow.set_tracking_uri(config.mlflow_tracking_uri)
    try:
        mlflow.set_experiment(config.mlflow_experiment_name)
    except Exception as e:
        logger.warning("MLflow experiment setup failed, traces will not be recorded: %s", e)
        return
    logger.info("MLflow tracing enabled: experiment=%s", config.mlflow_experiment_name)
