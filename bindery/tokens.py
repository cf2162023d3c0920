r"""
Bindery tokenizer: turn an argument vector back into discrete words.

The shell already split argv on unescaped whitespace; this module re-joins it
and scans it again so that two conventions work the same way everywhere:

- '--seed=3' and '--seed 3' are identical: every '=' that is not escaped as
  '\=' becomes a separator.
- a word that starts with a double quote runs to the next unescaped quote, so
  '"Jane Q"' (quotes passed through the shell as \"Jane Q\") is one word.

Words are recorded as half-open (start, end) ranges into the working string,
in left-to-right order; extract() slices a range and resolves the '\"' and
'\=' escapes.

Quick example
    >>> text = join(["--name=\"Jane", "Q\"", "--seed", "3"])
    >>> [extract(text, span) for span in scan(text)]
    ['--name', 'Jane Q', '--seed', '3']
"""
import re

# closing quote of a quoted word (an escaped quote does not close it)
_QUOTE = re.compile(r'(?<!\\)"')


def join(words, /):
    """
    Concatenate words with single-space separators and rewrite bare '='.

    Every word is followed by one space (the scan relies on a trailing
    separator). An '=' preceded by a backslash is kept literally.
    """
    text = "".join(word + " " for word in words)
    return re.sub(r"(?<!\\)=", " ", text)


def scan(text, /):
    """
    Find word boundaries in a joined working string.

    Returns a list of (start, end) half-open ranges.
    - spaces between words are skipped;
    - a word beginning with '"' starts after the quote and ends at the next
      '"' not preceded by a backslash (an unterminated quote runs to the end
      of the string, trailing separators excluded);
    - any other word ends at the next space.
    """
    spans = []
    length = len(text)
    location = 0

    while True:
        # next word boundary start
        while location < length and text[location] == " ":
            location += 1
        if location >= length:
            break

        if text[location] == '"':
            start = location + 1
            match = _QUOTE.search(text, start)
            if match:
                end = match.start()
            else:
                end = len(text.rstrip(" "))
                end = max(end, start)
            spans.append((start, end))
            location = end + 1
        else:
            start = location
            end = text.find(" ", start)
            if end == -1:
                end = length
            spans.append((start, end))
            location = end

    return spans


def extract(text, span, /):
    r"""
    Slice one word out of the working string and resolve escapes.

    '\"' becomes '"' and '\=' becomes '='; every other backslash is kept.
    """
    start, end = span
    return re.sub(r'\\(["=])', r"\1", text[start:end])


def tokenize(words, /):
    """
    Run the whole pipeline and yield the extracted words in order.
    """
    text = join(words)
    for span in scan(text):
        yield extract(text, span)


__all__ = (
    "join",
    "scan",
    "extract",
    "tokenize",
)
