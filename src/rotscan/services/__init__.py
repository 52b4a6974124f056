from .index_service import IndexService
from .duplicate_service import DuplicateScan, DuplicateService
from .age_service import AgeService
from .extension_service import ExtensionService
from .report_service import ReportService
from .rot_service import RotService


__all__ = [
    'IndexService',
    'DuplicateScan',
    'DuplicateService',
    'AgeService',
    'ExtensionService',
    'ReportService',
    'RotService',
]
