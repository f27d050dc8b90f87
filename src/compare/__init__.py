"""Symbol comparison and file-type dispatch."""

from compare.comparers import (
    compare_class,
    compare_interface,
    compare_method,
    compare_parameter,
    compare_source_details,
)
from compare.dispatch import (
    ComparerRegistry,
    LanguageSupport,
    OutputFile,
    compare_file,
    compare_output_files,
    default_registry,
)

__all__ = [
    "ComparerRegistry",
    "LanguageSupport",
    "OutputFile",
    "compare_class",
    "compare_file",
    "compare_interface",
    "compare_method",
    "compare_output_files",
    "compare_parameter",
    "compare_source_details",
    "default_registry",
]
