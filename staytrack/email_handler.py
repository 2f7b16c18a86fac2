"""
Email handling: reading saved messages and decoding them to plain text.
"""

import email
import email.errors
import email.header
import logging
import re
from email.utils import parseaddr
from html import unescape
from html.parser import HTMLParser
from pathlib import Path

from .providers import sender_domain_of

logger = logging.getLogger(__name__)

EMAIL_FILE_SUFFIXES = ('.eml', '.txt')


def decode_header_value(value):
    """Decode an email header value (handles encoded headers).

    Args:
        value: Raw header value

    Returns:
        Decoded string
    """
    if not value:
        return ""
    try:
        decoded_parts = email.header.decode_header(value)
    except email.errors.HeaderParseError:
        return str(value)
    return ''.join(
        _decode_bytes(part, charset) if isinstance(part, bytes) else part
        for part, charset in decoded_parts
    )


def _decode_bytes(payload, charset=None):
    """Decode bytes trying the declared charset, then common fallbacks."""
    charset_attempts = []
    if charset:
        charset_attempts.append(charset.lower())
        # Korean and Japanese mail is often mislabelled
        if charset.lower() in ('ks_c_5601-1987', 'euc-kr'):
            charset_attempts.append('cp949')
        elif charset.lower() in ('iso-2022-jp', 'shift_jis'):
            charset_attempts.append('cp932')

    # Always try these common encodings as fallbacks
    charset_attempts.extend(['utf-8', 'cp949', 'iso-8859-1'])

    seen = set()
    for cs in charset_attempts:
        if cs in seen:
            continue
        seen.add(cs)
        try:
            return payload.decode(cs)
        except (UnicodeDecodeError, LookupError):
            continue

    return payload.decode('utf-8', errors='replace')


def _decode_payload(part):
    """Decode an email part's payload with proper charset handling.

    Returns:
        Decoded string or empty string when there is no payload
    """
    payload = part.get_payload(decode=True)
    if not payload:
        return ""
    return _decode_bytes(payload, part.get_content_charset())


def _body_parts(msg):
    """Yield (content_type, text) for each decodable part that is not an attachment."""
    for part in msg.walk():
        if part.is_multipart() or part.get_content_disposition() == 'attachment':
            continue
        text = _decode_payload(part)
        if text:
            yield part.get_content_type(), text


# ============================================================================
# HTML TEXT EXTRACTION (using native Python html.parser)
# ============================================================================

class _TextExtractor(HTMLParser):
    """Extract visible text from HTML, one line per block element."""

    SKIP_TAGS = frozenset({'script', 'style', 'head', 'meta', 'link', 'noscript', 'svg', 'path'})
    BLOCK_TAGS = frozenset({'br', 'p', 'div', 'tr', 'li', 'h1', 'h2', 'h3', 'h4', 'table'})

    def __init__(self):
        super().__init__()
        self.text_parts = []
        self.skip_depth = 0

    def handle_starttag(self, tag, attrs):
        tag = tag.lower()
        if tag in self.SKIP_TAGS:
            self.skip_depth += 1
        elif tag in self.BLOCK_TAGS:
            self.text_parts.append('\n')

    def handle_endtag(self, tag):
        tag = tag.lower()
        if tag in self.SKIP_TAGS and self.skip_depth > 0:
            self.skip_depth -= 1
        elif tag in self.BLOCK_TAGS:
            self.text_parts.append('\n')

    def handle_data(self, data):
        if self.skip_depth == 0:
            text = data.strip()
            if text:
                self.text_parts.append(text)

    def get_text(self):
        return ' '.join(self.text_parts)


def strip_html_tags(html_text):
    """Remove HTML tags and return only visible text content.

    Line structure is kept: field patterns look for times on the same line
    as their date.
    """
    if not html_text:
        return ""

    parser = _TextExtractor()
    parser.feed(html_text)
    parser.close()
    text = unescape(parser.get_text())

    # If HTMLParser returns nothing for a large document, strip tags directly
    if not text.strip() and len(html_text) > 100:
        text = unescape(re.sub(r'<[^>]+>', ' ', html_text))

    # Normalize whitespace within lines and drop blank lines
    lines = (re.sub(r'[ \t\r\f\v]+', ' ', line).strip() for line in text.split('\n'))
    return '\n'.join(line for line in lines if line)


def email_text(msg):
    """Get the plain-text body of a message.

    The longest text/plain part wins. Without one, the longest text/html
    part is converted with strip_html_tags().

    Args:
        msg: email.message.Message object

    Returns:
        Body text, or "" when the message has no readable part
    """
    plain = ""
    html = ""
    for content_type, text in _body_parts(msg):
        if content_type == 'text/plain':
            plain = max(plain, text, key=len)
        elif content_type == 'text/html':
            html = max(html, text, key=len)
    return plain or strip_html_tags(html)


def sender_domain(from_header):
    """Get the sender's domain from a From header."""
    _, address = parseaddr(decode_header_value(from_header))
    return sender_domain_of(address)


def read_email_file(path):
    """Read a saved email (.eml) from disk.

    Args:
        path: Path to an RFC 822 message file

    Returns:
        Tuple of (subject, body, sender_domain); body is plain text, taken
        from the HTML part when there is no text part
    """
    with open(path, 'rb') as f:
        msg = email.message_from_binary_file(f)

    subject = decode_header_value(msg.get('Subject', ''))
    return subject, email_text(msg), sender_domain(msg.get('From', ''))


def iter_email_files(directory):
    """Yield saved email files in a directory, sorted by name."""
    for path in sorted(Path(directory).iterdir()):
        if path.is_file() and path.suffix.lower() in EMAIL_FILE_SUFFIXES:
            yield path
