# services/logging_service.py

"""
Central logging for the application.

Configures a standard logger with Python's built-in logging library and
provides LoggingService for:
- Logging prediction runs
- Tracking how often each disease ranks first (in-memory statistics)
- Logging errors raised while handling a submission

RotatingFileHandler keeps the log file from growing without bound.
"""

import logging
from logging.handlers import RotatingFileHandler
import os
from typing import Dict, List, Any, Optional
from datetime import datetime

from core.models import AIAnalysis, OutbreakMetrics, PatientData

LOG_DIR = "logs"
LOG_FILE = os.path.join(LOG_DIR, "prediction_history.log")


def setup_logger(
    name: str = 'PredictionLogger',
    log_file: str = LOG_FILE,
    level: int = logging.INFO
) -> logging.Logger:
    """
    Configure and return a logger instance.

    Calling this again for the same name does not add another handler.

    Args:
        name (str): Logger name.
        log_file (str): Path of the log file.
        level (int): Logging level (e.g. logging.INFO, logging.DEBUG).

    Returns:
        logging.Logger: The configured logger.
    """
    log_dir = os.path.dirname(log_file)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    logger = logging.getLogger(name)

    if logger.handlers:
        return logger

    logger.setLevel(level)

    formatter = logging.Formatter(
        '%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # 5MB per file, 5 old files kept
    handler = RotatingFileHandler(log_file, maxBytes=5*1024*1024, backupCount=5, encoding='utf-8')
    handler.setFormatter(formatter)

    logger.addHandler(handler)

    return logger


class LoggingService:
    """Service for logging prediction runs and keeping usage statistics.

    Provides:
    - Log prediction sessions
    - Track top-ranked diseases (in-memory statistics)
    - Error/warning/info passthrough
    """

    def __init__(
        self,
        logger_name: str = 'PredictionLogger',
        log_file: str = LOG_FILE,
        level: int = logging.INFO
    ):
        """Initialize LoggingService.

        Args:
            logger_name: Name of the logger to use
            log_file: Path of the log file
            level: Logging level
        """
        self.log_file = log_file
        self.logger = setup_logger(logger_name, log_file=log_file, level=level)
        self._top_disease_counts: Dict[str, int] = {}
        self._disease_names: Dict[str, str] = {}
        self._runs = 0

    def log_prediction(
        self,
        patient: PatientData,
        analysis: AIAnalysis,
        outbreak: Optional[OutbreakMetrics] = None
    ) -> None:
        """Log one prediction run and update the top-disease tally.

        Args:
            patient: Patient input of the run
            analysis: Result of the enhancement layer
            outbreak: Outbreak summary derived from the run (optional)
        """
        self._runs += 1
        top = analysis.top_prediction
        if top is None:
            self.logger.warning(
                f"Prediction: {len(patient.symptoms)} symptoms → no diseases in catalog"
            )
            return

        self.logger.info(
            f"Prediction: {len(patient.symptoms)} symptoms, age {patient.age} → "
            f"{top.disease.name} ({top.probability:.2f}%, "
            f"confidence {analysis.ai_confidence_score:.1f}, outbreak risk {top.outbreak_risk})"
        )

        if outbreak:
            self.logger.info(
                f"Outbreak summary: {outbreak.risk_level} risk, "
                f"~{outbreak.affected_population_estimate} people, containment {outbreak.time_to_containment}"
            )

        disease_id = top.disease.id
        self._disease_names[disease_id] = top.disease.name
        self._top_disease_counts[disease_id] = self._top_disease_counts.get(disease_id, 0) + 1

    def log_error(self, error_msg: str, exception: Optional[Exception] = None) -> None:
        """Log error message.

        Args:
            error_msg: Error message
            exception: Exception object (optional)
        """
        if exception:
            self.logger.error(f"{error_msg}: {str(exception)}", exc_info=True)
        else:
            self.logger.error(error_msg)

    def log_info(self, message: str) -> None:
        """Log info message."""
        self.logger.info(message)

    def log_warning(self, message: str) -> None:
        """Log warning message."""
        self.logger.warning(message)

    def get_most_predicted(self, top_n: int = 5) -> List[Dict[str, Any]]:
        """Diseases that ranked first most often.

        Args:
            top_n: Number of diseases to return

        Returns:
            List of dicts with disease id, name and count
        """
        sorted_counts = sorted(
            self._top_disease_counts.items(),
            key=lambda x: x[1],
            reverse=True
        )[:top_n]

        return [
            {
                "disease_id": disease_id,
                "disease_name": self._disease_names.get(disease_id, "Unknown"),
                "count": count,
            }
            for disease_id, count in sorted_counts
        ]

    def get_statistics(self) -> Dict[str, Any]:
        """Usage statistics for the current process."""
        return {
            "total_runs": self._runs,
            "most_predicted": self.get_most_predicted(top_n=10),
            "log_file": self.log_file,
            "log_file_exists": os.path.exists(self.log_file),
            "log_file_size": os.path.getsize(self.log_file) if os.path.exists(self.log_file) else 0,
            "timestamp": datetime.now().isoformat()
        }

    def clear_statistics(self) -> None:
        """Reset the in-memory tally."""
        self._top_disease_counts = {}
        self._disease_names = {}
        self._runs = 0
        self.logger.warning("Prediction statistics cleared!")
