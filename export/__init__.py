"""Export module: CSV, Excel (openpyxl) and PDF (fpdf2) for the schedule."""

from export.csv_export import CsvExporter
from export.excel_export import ExcelExporter
from export.pdf_export import PdfExporter

__all__ = ["CsvExporter", "ExcelExporter", "PdfExporter"]
