"""Application-wide constants."""

# Output filename bases, combined with a timestamp on save so runs never clobber each other
OUTPUT_BLOCKS_FILENAME = r"docweave_blocks.json"
OUTPUT_NODES_FILENAME = r"docweave_nodes.json"
OUTPUT_HTML_FILENAME = r"docweave_document.html"
OUTPUT_WORD_XML_FILENAME = r"docweave_document.xml"

# Placeholders used when a comment is missing data
DEFAULT_COMMENT_AUTHOR: str = "Unknown author"
EMPTY_COMMENT_CONTENT: str = "(empty comment)"
UNMATCHED_RANGE_TEXT: str = "(text not found)"

# Comment association scores
EXACT_MATCH_SCORE = 100
NORMALIZED_MATCH_SCORE = 60

# Warn when a document is suspiciously large
MAX_EXPECTED_BLOCKS = 10000

# Fallback for get_debug_mode() in utils
DEBUG_MODE_DEFAULT = False
