"""
Document format rules for Crowdin exports.

Crowdin can return translations either in the source file's own format
or converted to XLIFF. Formats the editor opens natively must come back
unmodified, everything else is requested as XLIFF.
"""

# Extensions exported "as is" (lowercase, without the dot)
NATIVE_EXTENSIONS = frozenset({"po", "xliff"})


def export_as_xliff(extension: str) -> bool:
    """
    Decide the ``exportAsXliff`` flag of a translation build.

    Args:
        extension: File extension with or without the leading dot, any case

    Returns:
        False for natively supported formats, True otherwise
    """
    return extension.lstrip(".").lower() not in NATIVE_EXTENSIONS
