"""Integration tests - the modules working together.

Covers the full flow of one submission:
catalog → base scorer → enhancement layer → outbreak summary → logging → reports

Run with: python app/tests/test_integration.py
"""

import sys
import os
import random
import tempfile
import shutil
import uuid
from datetime import datetime
from pathlib import Path

# Add app/ to the Python path
app_dir = Path(__file__).parent.parent
sys.path.insert(0, str(app_dir))

from core.models import PatientData
from core.prediction_engine import predict_disease, get_top_predictions, get_symptom_names
from core.ai_prediction_engine import AIPredictionEngine, validate_lookup_tables
from core.outbreak import calculate_outbreak_metrics
from database.database_manager import load_catalog
from services.config import load_config, log_level
from services.logging_service import LoggingService
from services.reporting import ReportingService


class TestFullWorkflow:
    """End-to-end flow of one prediction run."""

    def setup_method(self):
        self.temp_dir = tempfile.mkdtemp()
        self.logger_name = f"IntegrationLogger_{uuid.uuid4().hex}"

        self.config = load_config()
        self.catalog = load_catalog()
        self.engine = AIPredictionEngine(
            clock=lambda: datetime(2024, 7, 20),
            rng=random.Random(99),
            clamp_probability=self.config["prediction"]["clamp_probability"],
        )
        self.logger = LoggingService(
            logger_name=self.logger_name,
            log_file=os.path.join(self.temp_dir, "logs", "prediction_history.log"),
            level=log_level(self.config),
        )
        self.reporting = ReportingService(
            output_dir=os.path.join(self.temp_dir, "reports"),
            top_n=self.config["prediction"]["top_n"],
        )

    def teardown_method(self):
        import logging
        logger = logging.getLogger(self.logger_name)
        for handler in logger.handlers[:]:
            handler.close()
            logger.removeHandler(handler)

        if os.path.exists(self.temp_dir):
            shutil.rmtree(self.temp_dir)

    def run_submission(self, patient):
        analysis = self.engine.ai_predict_disease(patient, self.catalog.disease_list)
        outbreak = calculate_outbreak_metrics(analysis.predictions)
        self.logger.log_prediction(patient, analysis, outbreak)
        return analysis, outbreak

    def test_catalog_and_tables_agree(self):
        assert validate_lookup_tables(self.catalog.disease_list) == {}
        print("✓ Lookup tables only name catalog diseases")

    def test_dengue_after_travel_in_july(self):
        """Dengue symptoms after travel, peak dengue season."""
        patient = PatientData(
            age=28, gender="male",
            symptoms=("fever", "headache", "joint_pain", "body_ache", "rash"),
            travel_history=True,
        )
        analysis, outbreak = self.run_submission(patient)
        top = analysis.top_prediction

        # base 0.7*5/6 + 0.075 + 0.105 = 76.33, +18 early boost, *1.4 in July
        assert top.disease.id == "dengue"
        assert top.probability == 132.06, f"Expected 132.06, got {top.probability}"
        assert "Recent travel history" in top.risk_factors
        assert "Early symptom pattern detected" in top.risk_factors
        # low contagiousness keeps the outbreak risk low
        assert top.outbreak_risk == "low"
        assert outbreak.time_to_containment == "2-3 weeks"
        assert analysis.ai_confidence_score == 100.0

        metrics = analysis.regional_risk_metrics
        assert metrics.transmission_rate == 0.8
        assert metrics.potential_cases_per_week == 6
        assert metrics.geographical_spread_risk == "low"
        assert metrics.early_intervention_window == "2-4 days"
        print(f"✓ Dengue ranked first at {top.probability}%")

    def test_workflow_with_logging_and_reports(self):
        patient = PatientData(
            age=72, gender="female",
            symptoms=("fever", "cough", "shortness_of_breath", "chest_pain", "fatigue"),
            pre_existing_conditions=("Heart disease",),
        )
        analysis, outbreak = self.run_submission(patient)
        top = analysis.top_prediction

        # pneumonia: (83.5 + 10) * 0.8 in July = 74.8, bronchitis keeps 77.5
        assert top.disease.id == "bronchitis"
        assert top.probability == 77.5
        assert analysis.predictions[1].disease.id == "pneumonia"
        assert analysis.predictions[1].probability == 74.8
        assert outbreak.risk_level == top.outbreak_risk == "medium"

        top_predictions = get_top_predictions(analysis.predictions, self.config["prediction"]["top_n"])
        assert len(top_predictions) == 3

        symptom_names = get_symptom_names(patient.symptoms, self.catalog.symptoms)
        paths = [
            self.reporting.generate_report(patient, analysis, outbreak, format=fmt, symptom_names=symptom_names)
            for fmt in ("txt", "pdf", "csv")
        ]
        assert all(os.path.exists(p) for p in paths)

        with open(paths[0], 'r', encoding='utf-8') as f:
            content = f.read()
        assert "BRONCHITIS" in content
        assert "Heart disease" in content
        assert ", ".join(symptom_names) in content

        stats = self.logger.get_statistics()
        assert stats["total_runs"] == 1
        assert stats["most_predicted"][0]["disease_id"] == "bronchitis"
        print(f"✓ Workflow produced {len(paths)} reports for {top.disease.name}")

    def test_enhancement_keeps_base_ranking_inputs(self):
        patient = PatientData(age=5, gender="other", symptoms=("fever", "cold", "rash"))
        base = predict_disease(patient, self.catalog.disease_list)
        analysis = self.engine.enhance(base, patient)

        assert {p.disease.id for p in base} == {p.disease.id for p in analysis.predictions}
        measles = next(p for p in analysis.predictions if p.disease.id == "measles")
        assert "Age-related risk" in measles.risk_factors
        assert "School-aged children" in analysis.regional_risk_metrics.demographic_risk_groups
        print(f"✓ Child with rash: top {analysis.top_prediction.disease.name}")

    def test_repeated_runs_counted(self):
        covid_patient = PatientData(
            age=40, gender="male",
            symptoms=("fever", "cough", "fatigue", "loss_of_taste", "loss_of_smell"),
        )
        gastro_patient = PatientData(
            age=40, gender="male",
            symptoms=("nausea", "vomiting", "diarrhea", "abdominal_pain"),
        )
        for patient in (covid_patient, covid_patient, gastro_patient):
            self.run_submission(patient)

        most = self.logger.get_most_predicted()
        assert most[0] == {"disease_id": "covid19", "disease_name": "COVID-19", "count": 2}
        assert most[1]["disease_id"] == "gastroenteritis"
        print(f"✓ Most predicted: {most}")


def run_all_tests():
    """Run all tests and report the results."""
    print("=" * 60)
    print("Testing Integration")
    print("=" * 60)

    test_classes = [TestFullWorkflow]
    total_tests = 0
    passed_tests = 0
    failed_tests = []

    for test_class in test_classes:
        print(f"\n--- {test_class.__name__} ---")
        instance = test_class()

        test_methods = [m for m in dir(instance) if m.startswith('test_')]

        for method_name in test_methods:
            total_tests += 1
            try:
                if hasattr(instance, 'setup_method'):
                    instance.setup_method()

                method = getattr(instance, method_name)
                method()
                passed_tests += 1

            except AssertionError as e:
                failed_tests.append((test_class.__name__, method_name, str(e)))
                print(f"✗ {method_name} FAILED: {e}")
            except Exception as e:
                failed_tests.append((test_class.__name__, method_name, str(e)))
                print(f"✗ {method_name} ERROR: {e}")
            finally:
                if hasattr(instance, 'teardown_method'):
                    instance.teardown_method()

    # Summary
    print("\n" + "=" * 60)
    print("Test Summary")
    print("=" * 60)
    print(f"Total tests: {total_tests}")
    print(f"Passed: {passed_tests}")
    print(f"Failed: {len(failed_tests)}")

    if failed_tests:
        print("\nFailed tests:")
        for class_name, method_name, error in failed_tests:
            print(f"  - {class_name}.{method_name}: {error}")
        return False
    else:
        print("\n✅ All tests passed!")
        return True


if __name__ == '__main__':
    success = run_all_tests()
    sys.exit(0 if success else 1)
