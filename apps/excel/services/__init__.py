"""
Excel app services layer.
"""

from .exceptions import (
    ExcelServiceError,
    ExcelPermissionError,
    InvalidExportOptionsError,
    InvalidWorkbookError,
)

from .permissions import (
    ExportType,
    ExportScope,
    DateRange,
    ImportType,
    get_excel_permissions,
    resolve_date_range,
)

from .exporting import (
    XLSX_CONTENT_TYPE,
    build_frames,
    export_workbook,
    export_preview,
)

from .importing import (
    import_workbook,
    import_template,
)


__all__ = [
    # Exceptions
    'ExcelServiceError',
    'ExcelPermissionError',
    'InvalidExportOptionsError',
    'InvalidWorkbookError',

    # Permissions
    'ExportType',
    'ExportScope',
    'DateRange',
    'ImportType',
    'get_excel_permissions',
    'resolve_date_range',

    # Export
    'XLSX_CONTENT_TYPE',
    'build_frames',
    'export_workbook',
    'export_preview',

    # Import
    'import_workbook',
    'import_template',
]
