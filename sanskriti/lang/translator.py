"""Sanskrit keyword translation. sanskriti source may spell keywords in Sanskrit; before lexing, every occurrence of a
Sanskrit keyword is blindly replaced by its canonical Lox keyword, so the `pure` pipeline only ever sees canonical
keywords. Like a #define, replacement is verbatim: it also applies inside string literals and identifiers.
"""

KEYWORDS = {
    "श्रेणी": "class",
    "अथ्वा": "else",
    "असत्य": "false",
    "पुरा": "for",
    "विनियोग": "fun",
    "यदि": "if",
    "नेति": "nil",
    "विकल्प": "or",
    "कथय": "print",
    "देयम": "return",
    "महा": "super",
    "यह": "this",
    "सत्य": "true",
    "चर": "var",
    "यावद": "while",
}


def translate(source, keywords=None):
    """Replaces all Sanskrit keywords in source with their canonical equivalents. Longer keywords are replaced first,
    so that a keyword containing another ("असत्य" contains "सत्य") is never split.
    """
    if keywords is None:
        keywords = KEYWORDS

    for keyword in sorted(keywords, key=len, reverse=True):
        source = source.replace(keyword, keywords[keyword])
    return source
