"""
PDF Relay - Thin HTTP relay for PDF generation and storage.

Accepts base64 PDFs or HTML markup from clients, converts markup to PDF
through PDFShift and uploads the bytes to Dropbox. Holds no state between
requests.
"""

__version__ = "0.1.0"
