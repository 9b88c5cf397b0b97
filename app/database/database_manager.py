import json
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Any, Optional

from core.models import (
    Catalog, Disease, Symptom, SEVERITY_LEVELS, RISK_LEVELS
)

DEFAULT_DB_PATH = Path(__file__).resolve().parent


class CatalogError(ValueError):
    """Raised when a catalog file holds an invalid entry."""


class DatabaseManager:
    """Manager for the static symptom and disease catalogs."""

    def __init__(self, db_path: Path = DEFAULT_DB_PATH):
        """Initialize DatabaseManager with the path to the database folder.

        Args:
            db_path: Path object pointing at the folder with the JSON files
        """
        self.db_path = Path(db_path)
        self.symptoms: Dict[str, Symptom] = {}
        self.diseases: Dict[str, Disease] = {}

    def load_all(self) -> Catalog:
        """Load both catalogs, check cross references and return them."""
        self.load_symptoms()
        self.load_diseases()
        self.validate()
        return self.catalog

    @property
    def catalog(self) -> Catalog:
        return Catalog(symptoms=dict(self.symptoms), diseases=dict(self.diseases))

    def _read_list(self, file_name: str) -> List[Dict[str, Any]]:
        file_path = self.db_path / file_name
        if not file_path.exists():
            raise FileNotFoundError(f"Catalog file not found: {file_path}")

        with open(file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)

        if not isinstance(data, list):
            raise CatalogError(f"{file_name} must hold a list of entries")
        return data

    def load_symptoms(self):
        """Load symptoms from symptoms.json, keeping file order."""
        self.symptoms = {}
        for item in self._read_list("symptoms.json"):
            try:
                symptom = Symptom(
                    id=item['id'],
                    name=item['name'],
                    description=item.get('description', '')
                )
            except KeyError as e:
                raise CatalogError(f"Symptom entry missing field {e}: {item}") from e
            if symptom.id in self.symptoms:
                raise CatalogError(f"Duplicate symptom id: {symptom.id}")
            self.symptoms[symptom.id] = symptom

    def load_diseases(self):
        """Load diseases from diseases.json, keeping file order."""
        self.diseases = {}
        for item in self._read_list("diseases.json"):
            try:
                disease = Disease(
                    id=item['id'],
                    name=item['name'],
                    description=item.get('description', ''),
                    symptoms=tuple(item.get('symptoms', [])),
                    severity=item['severity'],
                    contagiousness=item['contagiousness'],
                    incubation_period=item.get('incubation_period', ''),
                    treatment_approach=item.get('treatment_approach', '')
                )
            except KeyError as e:
                raise CatalogError(f"Disease entry missing field {e}: {item}") from e

            if disease.severity not in SEVERITY_LEVELS:
                raise CatalogError(f"Disease {disease.id}: unknown severity '{disease.severity}'")
            if disease.contagiousness not in RISK_LEVELS:
                raise CatalogError(
                    f"Disease {disease.id}: unknown contagiousness '{disease.contagiousness}'"
                )
            if disease.id in self.diseases:
                raise CatalogError(f"Duplicate disease id: {disease.id}")
            self.diseases[disease.id] = disease

    def validate(self):
        """Every disease may only reference symptoms that exist in the catalog."""
        for disease in self.diseases.values():
            unknown = [sid for sid in disease.symptoms if sid not in self.symptoms]
            if unknown:
                raise CatalogError(
                    f"Disease {disease.id} references unknown symptoms: {', '.join(unknown)}"
                )

    def get_symptom(self, symptom_id: str) -> Optional[Symptom]:
        """Get symptom by ID."""
        return self.symptoms.get(symptom_id)

    def get_disease(self, disease_id: str) -> Optional[Disease]:
        """Get disease by ID."""
        return self.diseases.get(disease_id)


@lru_cache(maxsize=1)
def load_catalog() -> Catalog:
    """Load the bundled catalog once per process."""
    return DatabaseManager().load_all()
