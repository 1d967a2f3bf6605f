"""
String utility functions for replaygen.

Provides the identifier transformations used when synthesizing variable,
alias and routine names.
"""

from __future__ import annotations


def to_camel_case(value: str) -> str:
    """
    Lower-case the first character of an identifier.

    Examples:
        >>> to_camel_case("Paragraph")
        'paragraph'
        >>> to_camel_case("WRun")
        'wRun'
    """
    if not value or value.isspace():
        return value
    return value[0].lower() + value[1:]


def to_pascal_case(value: str) -> str:
    """
    Upper-case the first character of an identifier.

    Examples:
        >>> to_pascal_case("imagePart1")
        'ImagePart1'
    """
    if not value:
        return value
    return value[0].upper() + value[1:]


def to_title_case(value: str) -> str:
    """
    Upper-case the first character and lower-case every later letter.

    Examples:
        >>> to_title_case("SV")
        'Sv'
        >>> to_title_case("int32")
        'Int32'
    """
    if not value:
        return value
    head = value[0] if value[0].isupper() else value[0].upper()
    tail = "".join(c.lower() if not c.isspace() and not c.islower() else c for c in value[1:])
    return head + tail


def upper_case_chars(value: str) -> str:
    """
    Keep only the upper-case letters of a string.

    Examples:
        >>> upper_case_chars("StringValue")
        'SV'
    """
    return "".join(c for c in value if c.isupper())


def upper_case_and_digit_chars(value: str) -> str:
    """
    Keep only the upper-case letters and digits of a string, in order.

    Examples:
        >>> upper_case_and_digit_chars("DocumentFormat.OpenXml.Office2010.Word")
        'DFOXO2010W'
    """
    return "".join(c for c in value if c.isupper() or c.isdigit())
