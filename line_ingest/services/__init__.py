"""
Ingestion services

Normalizer, profile enrichment, Sheets sink and the batch pipeline.
"""

from .dedup import SeenMessages
from .pipeline import IngestPipeline
from .profile import LineProfileClient, ProfileEnricher
from .sheets import SheetsWriter

__all__ = ["IngestPipeline", "LineProfileClient", "ProfileEnricher", "SeenMessages", "SheetsWriter"]
