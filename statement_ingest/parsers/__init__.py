"""Statement parsing strategies."""
from .base_parser import BaseStatementParser
from .csv_parser import CSVStatementParser
from .inter_parser import InterCSVParser
from .nubank_parser import NubankCSVParser
from .ocr_parser import OcrStatementParser
from .ofx_parser import OFXParser
from .pdf_parser import PDFParser

__all__ = [
    'BaseStatementParser',
    'CSVStatementParser',
    'InterCSVParser',
    'NubankCSVParser',
    'OcrStatementParser',
    'OFXParser',
    'PDFParser',
]
