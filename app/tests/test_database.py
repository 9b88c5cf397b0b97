"""Database tests - load the bundled catalogs and reject broken ones.

Covers:
- Loading app/database/*.json (symptoms, diseases)
- Catalog invariants (unique ids, known tiers, symptom references)
- CatalogError for invalid catalog files
- Scoring against the real catalog

Run with: python app/tests/test_database.py
"""

import sys
import os
import json
import tempfile
import shutil
from pathlib import Path

# Add app/ to the Python path
app_dir = Path(__file__).parent.parent
sys.path.insert(0, str(app_dir))

from core.models import SEVERITY_LEVELS, RISK_LEVELS, PatientData
from core.prediction_engine import predict_disease
from database.database_manager import DatabaseManager, CatalogError, load_catalog


VALID_SYMPTOMS = [
    {"id": "fever", "name": "Fever", "description": "High temperature"},
    {"id": "cough", "name": "Cough"},
]

VALID_DISEASE = {
    "id": "flu",
    "name": "Flu",
    "description": "Test disease",
    "symptoms": ["fever", "cough"],
    "severity": "medium",
    "contagiousness": "high",
    "incubation_period": "1-4 days",
    "treatment_approach": "Rest",
}


class TestDatabaseConnection:
    """Load the bundled catalog files."""

    def setup_method(self):
        self.db_dir = Path(__file__).parent.parent / "database"
        self.manager = DatabaseManager(self.db_dir)
        self.catalog = self.manager.load_all()

    def test_database_files_exist(self):
        assert (self.db_dir / "symptoms.json").exists()
        assert (self.db_dir / "diseases.json").exists()
        print("✓ Database files found")

    def test_load_symptoms(self):
        assert len(self.catalog.symptoms) == 21
        fever = self.catalog.symptoms["fever"]
        assert fever.name
        print(f"✓ Loaded {len(self.catalog.symptoms)} symptoms, sample: {fever.id} - {fever.name}")

    def test_load_diseases_in_file_order(self):
        ids = [d.id for d in self.catalog.disease_list]
        assert ids == [
            "covid19", "influenza", "common_cold", "pneumonia", "bronchitis",
            "sinusitis", "gastroenteritis", "strep_throat", "measles", "dengue",
        ]
        print(f"✓ Loaded {len(ids)} diseases in file order")

    def test_disease_fields(self):
        covid = self.catalog.diseases["covid19"]
        assert covid.name == "COVID-19"
        assert covid.severity == "high"
        assert covid.contagiousness == "very high"
        assert covid.incubation_period == "2-14 days"
        assert isinstance(covid.symptoms, tuple)
        print("✓ Disease fields mapped")

    def test_catalog_invariants(self):
        for disease in self.catalog.disease_list:
            assert disease.severity in SEVERITY_LEVELS
            assert disease.contagiousness in RISK_LEVELS
            assert disease.symptoms, f"{disease.id} lists no symptoms"
            for symptom_id in disease.symptoms:
                assert symptom_id in self.catalog.symptoms, f"{disease.id}: unknown symptom {symptom_id}"
        print("✓ Every disease references known symptoms and tiers")

    def test_lookups(self):
        assert self.manager.get_disease("dengue").name
        assert self.manager.get_symptom("loss_of_appetite") is not None
        assert self.manager.get_disease("unknown") is None
        print("✓ get_disease / get_symptom")

    def test_load_catalog_cached(self):
        assert load_catalog() is load_catalog()
        print("✓ load_catalog returns the cached catalog")


class TestInvalidCatalog:
    """Broken catalog files are rejected with CatalogError."""

    def setup_method(self):
        self.temp_dir = tempfile.mkdtemp()

    def teardown_method(self):
        if os.path.exists(self.temp_dir):
            shutil.rmtree(self.temp_dir)

    def write(self, symptoms, diseases):
        with open(os.path.join(self.temp_dir, "symptoms.json"), "w", encoding="utf-8") as f:
            json.dump(symptoms, f)
        with open(os.path.join(self.temp_dir, "diseases.json"), "w", encoding="utf-8") as f:
            json.dump(diseases, f)
        return DatabaseManager(Path(self.temp_dir))

    def assert_catalog_error(self, manager, expected):
        try:
            manager.load_all()
        except CatalogError as e:
            assert expected in str(e), f"Unexpected message: {e}"
            return str(e)
        assert False, "CatalogError not raised"

    def test_valid_minimal_catalog(self):
        catalog = self.write(VALID_SYMPTOMS, [VALID_DISEASE]).load_all()
        assert list(catalog.diseases) == ["flu"]
        assert catalog.symptoms["cough"].description == ""
        print("✓ Minimal catalog loads")

    def test_missing_file(self):
        manager = DatabaseManager(Path(self.temp_dir))
        try:
            manager.load_all()
        except FileNotFoundError:
            print("✓ Missing catalog file raises FileNotFoundError")
            return
        assert False, "FileNotFoundError not raised"

    def test_unknown_symptom_reference(self):
        disease = dict(VALID_DISEASE, symptoms=["fever", "rash"])
        message = self.assert_catalog_error(self.write(VALID_SYMPTOMS, [disease]), "rash")
        print(f"✓ {message}")

    def test_unknown_severity(self):
        disease = dict(VALID_DISEASE, severity="extreme")
        self.assert_catalog_error(self.write(VALID_SYMPTOMS, [disease]), "severity")
        print("✓ Unknown severity rejected")

    def test_unknown_contagiousness(self):
        disease = dict(VALID_DISEASE, contagiousness="very low")
        self.assert_catalog_error(self.write(VALID_SYMPTOMS, [disease]), "contagiousness")
        print("✓ Unknown contagiousness rejected")

    def test_missing_field(self):
        disease = {k: v for k, v in VALID_DISEASE.items() if k != "severity"}
        self.assert_catalog_error(self.write(VALID_SYMPTOMS, [disease]), "missing field")
        print("✓ Missing field rejected")

    def test_duplicate_ids(self):
        self.assert_catalog_error(self.write(VALID_SYMPTOMS + VALID_SYMPTOMS[:1], [VALID_DISEASE]), "Duplicate")
        self.assert_catalog_error(self.write(VALID_SYMPTOMS, [VALID_DISEASE, VALID_DISEASE]), "Duplicate")
        print("✓ Duplicate ids rejected")

    def test_not_a_list(self):
        self.assert_catalog_error(self.write({"fever": "Fever"}, [VALID_DISEASE]), "list")
        print("✓ Non-list catalog rejected")

    def test_catalog_error_is_value_error(self):
        assert issubclass(CatalogError, ValueError)
        print("✓ CatalogError is a ValueError")


class TestScoringWithRealData:
    """Base scorer against the bundled catalog."""

    def setup_method(self):
        self.catalog = load_catalog()

    def test_gastro_symptoms(self):
        patient = PatientData(
            age=25, gender="female",
            symptoms=("nausea", "vomiting", "diarrhea", "abdominal_pain", "fever")
        )
        predictions = predict_disease(patient, self.catalog.disease_list)
        top = predictions[0]

        # 0.7 + 0.075 + 0.015
        assert top.disease.id == "gastroenteritis"
        assert top.probability == 79.0
        assert top.outbreak_risk == "high"
        print(f"✓ Gastro symptoms rank {top.disease.name} first ({top.probability}%)")

    def test_travel_raises_dengue(self):
        symptoms = ("fever", "headache", "joint_pain", "body_ache", "rash", "fatigue")
        home = PatientData(age=25, gender="male", symptoms=symptoms)
        abroad = PatientData(age=25, gender="male", symptoms=symptoms, travel_history=True)

        dengue_home = next(p for p in predict_disease(home, self.catalog.disease_list) if p.disease.id == "dengue")
        dengue_abroad = next(p for p in predict_disease(abroad, self.catalog.disease_list) if p.disease.id == "dengue")

        assert dengue_home.probability == 79.0
        assert dengue_abroad.probability == 88.0
        assert "Recent travel history" in dengue_abroad.risk_factors
        print(f"✓ Travel raises dengue: {dengue_home.probability} → {dengue_abroad.probability}")


def run_all_tests():
    """Run all tests and report the results."""
    print("=" * 60)
    print("Testing Database Catalogs")
    print("=" * 60)

    test_classes = [TestDatabaseConnection, TestInvalidCatalog, TestScoringWithRealData]
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
