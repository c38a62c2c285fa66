"""
tokenscope - design token, UI pattern and site architecture extraction.
"""

from __future__ import annotations

__version__ = "0.1.0"

from .assembler import ResultAssembler
from .config import Config
from .legacy import LegacySchemaBridge
from .pipeline import ExtractionPipeline, RunOutput

__all__ = ["__version__", "Config", "ExtractionPipeline", "LegacySchemaBridge", "ResultAssembler", "RunOutput"]
