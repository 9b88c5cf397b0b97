# services/reporting.py

"""
Service for rendering a finished prediction run as a report.

Provides:
- TXT reports
- PDF reports (fpdf2)
- CSV export of the ranked predictions (pandas)
"""

import os
from datetime import datetime
from typing import List, Optional, Sequence

import pandas as pd
from fpdf import FPDF

from core.models import AIAnalysis, OutbreakMetrics, PatientData, PredictionResult

REPORT_FORMATS = ("txt", "pdf", "csv")

TABLE_COLUMNS = ["Rank", "Disease", "Probability (%)", "Outbreak Risk", "Severity", "Contagiousness"]


def predictions_to_frame(predictions: Sequence[PredictionResult]) -> pd.DataFrame:
    """Ranked predictions as a DataFrame for tables and CSV export."""
    rows = []
    for rank, prediction in enumerate(predictions, 1):
        row = prediction.to_row()
        rows.append({
            "Rank": rank,
            "Disease": row["disease"],
            "Probability (%)": row["probability"],
            "Outbreak Risk": row["outbreak_risk"],
            "Severity": row["severity"],
            "Contagiousness": row["contagiousness"],
        })
    return pd.DataFrame(rows, columns=TABLE_COLUMNS)


def _latin1(text: str) -> str:
    # Core PDF fonts only cover latin-1
    return text.encode('latin-1', 'replace').decode('latin-1')


class ReportingService:
    """Generates reports from a prediction run."""

    def __init__(self, output_dir: str = "reports", top_n: int = 3):
        """Initialize ReportingService.

        Args:
            output_dir: Directory the reports are written to
            top_n: Number of predictions detailed in TXT/PDF reports
        """
        os.makedirs(output_dir, exist_ok=True)
        self.output_dir = output_dir
        self.top_n = top_n

    def _generate_filename(self, extension: str) -> str:
        """Unique file name based on the current timestamp."""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        return os.path.join(self.output_dir, f"prediction_{timestamp}.{extension}")

    def _patient_lines(self, patient: PatientData, symptom_names: Optional[List[str]]) -> List[str]:
        lines = [
            f"Age: {patient.age}",
            f"Gender: {patient.gender}",
            f"Recent travel: {'yes' if patient.travel_history else 'no'}",
        ]
        if patient.pre_existing_conditions:
            lines.append(f"Pre-existing conditions: {', '.join(patient.pre_existing_conditions)}")
        if patient.vaccination_status:
            lines.append(f"Vaccination status: {patient.vaccination_status}")
        names = symptom_names if symptom_names is not None else list(patient.symptoms)
        lines.append(f"Symptoms: {', '.join(names) if names else '(none)'}")
        return lines

    def generate_txt_report(
        self,
        patient: PatientData,
        analysis: AIAnalysis,
        outbreak: OutbreakMetrics,
        symptom_names: Optional[List[str]] = None
    ) -> str:
        """
        Write a TXT report of a prediction run.

        Args:
            patient (PatientData): Patient input of the run.
            analysis (AIAnalysis): Enhanced predictions of the run.
            outbreak (OutbreakMetrics): Outbreak summary of the run.
            symptom_names (Optional[List[str]]): Display names for the symptoms.

        Returns:
            str: Path of the written report.
        """
        filepath = self._generate_filename("txt")

        with open(filepath, 'w', encoding='utf-8') as f:
            f.write("=" * 40 + "\n")
            f.write("      DISEASE PREDICTION REPORT\n")
            f.write("=" * 40 + "\n")
            f.write(f"Date: {datetime.now().strftime('%d-%m-%Y %H:%M:%S')}\n\n")

            f.write("PATIENT:\n")
            for line in self._patient_lines(patient, symptom_names):
                f.write(f"  - {line}\n")
            f.write("\n" + "=" * 40 + "\n\n")

            if not analysis.predictions:
                f.write("RESULT: No diseases available for prediction.\n")
                return filepath

            f.write(f"AI Confidence Score: {analysis.ai_confidence_score:.1f}%\n\n")

            for rank, prediction in enumerate(analysis.predictions[:self.top_n], 1):
                f.write(f"--- #{rank} {prediction.disease.name.upper()} ---\n")
                f.write(f"Probability: {prediction.probability:.2f}%\n")
                f.write(f"Outbreak risk: {prediction.outbreak_risk}\n")
                f.write(f"Treatment approach:\n{prediction.disease.treatment_approach}\n")
                if prediction.risk_factors:
                    f.write("Risk factors:\n")
                    for factor in prediction.risk_factors:
                        f.write(f"  - {factor}\n")
                f.write("Recommendations:\n")
                for recommendation in prediction.recommendations:
                    f.write(f"  - {recommendation}\n")
                f.write("\n")

            f.write("=" * 40 + "\n")
            f.write("--- OUTBREAK ANALYSIS ---\n")
            f.write("=" * 40 + "\n\n")
            f.write(f"Risk level: {outbreak.risk_level}\n")
            f.write(f"Spread rate (R0): {outbreak.spread_rate:.1f}\n")
            f.write(f"Affected population estimate: {outbreak.affected_population_estimate}\n")
            f.write(f"Time to containment: {outbreak.time_to_containment}\n")

            regional = analysis.regional_risk_metrics
            if regional:
                f.write("\nRegional risk:\n")
                f.write(f"  - Transmission rate: {regional.transmission_rate}\n")
                f.write(f"  - Potential cases per week: {regional.potential_cases_per_week}\n")
                f.write(f"  - Geographical spread risk: {regional.geographical_spread_risk}\n")
                f.write(f"  - Early intervention window: {regional.early_intervention_window}\n")
                f.write(f"  - Risk groups: {', '.join(regional.demographic_risk_groups)}\n")

        return filepath

    def generate_pdf_report(
        self,
        patient: PatientData,
        analysis: AIAnalysis,
        outbreak: OutbreakMetrics,
        symptom_names: Optional[List[str]] = None
    ) -> str:
        """
        Write a PDF report of a prediction run.

        Returns:
            str: Path of the written report.
        """
        filepath = self._generate_filename("pdf")
        pdf = FPDF()
        pdf.add_page()

        def line(text: str, height: float = 5, style: str = '', size: int = 11, align: str = 'L'):
            pdf.set_font("Helvetica", style, size)
            pdf.multi_cell(0, height, _latin1(text), new_x="LMARGIN", new_y="NEXT", align=align)

        line("Disease Prediction Report", height=10, style='B', size=16, align='C')
        line(f"Date: {datetime.now().strftime('%d-%m-%Y %H:%M:%S')}", size=10, align='C')
        pdf.ln(5)

        line("Patient:", height=8, style='B')
        for text in self._patient_lines(patient, symptom_names):
            line(text)
        pdf.ln(5)

        if not analysis.predictions:
            line("No diseases available for prediction.", height=10, style='BI', size=12)
            pdf.output(filepath)
            return filepath

        line(f"AI Confidence Score: {analysis.ai_confidence_score:.1f}%", height=8, style='B')
        pdf.ln(3)

        for rank, prediction in enumerate(analysis.predictions[:self.top_n], 1):
            line(f"#{rank} {prediction.disease.name}", height=8, style='B', size=13)
            line(f"Probability: {prediction.probability:.2f}%   Outbreak risk: {prediction.outbreak_risk}")
            line(f"Treatment: {prediction.disease.treatment_approach}")
            if prediction.risk_factors:
                line(f"Risk factors: {', '.join(prediction.risk_factors)}")
            for recommendation in prediction.recommendations:
                line(f"- {recommendation}", size=10)
            pdf.ln(4)

        line("Outbreak Analysis", height=8, style='B', size=13)
        line(f"Risk level: {outbreak.risk_level}")
        line(f"Spread rate (R0): {outbreak.spread_rate:.1f}")
        line(f"Affected population estimate: {outbreak.affected_population_estimate}")
        line(f"Time to containment: {outbreak.time_to_containment}")

        pdf.output(filepath)
        return filepath

    def export_csv(self, analysis: AIAnalysis) -> str:
        """Write all ranked predictions to CSV."""
        filepath = self._generate_filename("csv")
        predictions_to_frame(analysis.predictions).to_csv(filepath, index=False)
        return filepath

    def generate_report(
        self,
        patient: PatientData,
        analysis: AIAnalysis,
        outbreak: OutbreakMetrics,
        format: str = "pdf",
        symptom_names: Optional[List[str]] = None
    ) -> str:
        """Generate a report in the requested format ('txt', 'pdf' or 'csv').

        Raises:
            ValueError: For any other format.
        """
        fmt = format.lower()
        if fmt == "pdf":
            return self.generate_pdf_report(patient, analysis, outbreak, symptom_names)
        if fmt == "txt":
            return self.generate_txt_report(patient, analysis, outbreak, symptom_names)
        if fmt == "csv":
            return self.export_csv(analysis)
        raise ValueError(f"Unknown report format '{format}', expected one of {', '.join(REPORT_FORMATS)}")
