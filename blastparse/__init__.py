"""
BLAST Report Parser
===================
Structured record extraction from pairwise alignment search reports
(NCBI BLAST plain-text output).

Architecture:
    - Scanner: Immutable cursor with anchor search and lookahead
    - Header Extractor: Parses the program name and query length
    - Alignment Extractor: Parses one hit record at a time
    - Validation Engine: Summarises hits and flags inconsistencies
    - Engine: Reads the report and produces structured JSON

Version: 0.1.0
"""

__version__ = "0.1.0"
