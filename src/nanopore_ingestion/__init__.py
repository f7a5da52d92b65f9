"""
Nanopore Ingestion Engine

Turns uploaded nanopore sample submission PDFs into validated, indexed
structured records, and answers questions over the indexed forms.
"""

__version__ = "1.0.0"
