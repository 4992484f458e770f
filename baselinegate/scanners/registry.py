import logging
from typing import List, Optional

from baselinegate.mappings.loader import default_mapping_tables
from baselinegate.mappings.tables import MappingTables
from baselinegate.scanners.base import SourceScanner
from baselinegate.scanners.css import CSSScanner
from baselinegate.scanners.markup import MarkupScanner
from baselinegate.scanners.script import ScriptScanner

logger = logging.getLogger("baselinegate.scanners")


class ScannerRegistry:
    """
    Picks a scanner by file extension.
    Scanners hold no per-scan state and are shared across worker threads.
    """

    def __init__(self, tables: Optional[MappingTables] = None):
        tables = tables or default_mapping_tables()
        css = CSSScanner()
        script = ScriptScanner(tables.js_api.keys())
        self.scanners: List[SourceScanner] = [css, script, MarkupScanner(css, script)]

    def scanner_for(self, file_path: str) -> Optional[SourceScanner]:
        for scanner in self.scanners:
            if scanner.handles(file_path):
                return scanner
        logger.debug(f"No scanner for {file_path}")
        return None

    def supported_extensions(self) -> List[str]:
        return [ext for scanner in self.scanners for ext in scanner.extensions]
