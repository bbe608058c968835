"""Constants used throughout ReferrerCop.

This module contains enums, default values, and the regular expressions
that recognize each supported input format.
"""

import re
from enum import Enum


class ListRole(Enum):
    """Role a rule list plays during classification."""
    BLACKLIST = "blacklist"
    WHITELIST = "whitelist"


class UrlKind(Enum):
    """Class of URL to extract from an input."""
    HAM = "ham"
    SPAM = "spam"


# Directories searched for the config file, in order
CONFIG_PATHS = [
    ".",
    "~",
    "/etc",
    "/usr/local/etc",
    "/usr/local/share/referrercop",
    "/usr/share/referrercop",
    "/usr/etc",
]

CONFIG_FILENAME = "referrercop.yaml"

# Application-wide defaults
DEFAULTS = {
    "blacklist_file": "/usr/local/share/referrercop/blacklist.refcop",
    "whitelist_file": "/usr/local/share/referrercop/whitelist.refcop",
    "cache_path": "/tmp",
    "update_url": "http://referrercop.org/blacklists/referrer-standard.txt.gz",
    "update_sha1_url": "http://referrercop.org/blacklists/referrer-standard.sha1",
}

BACKUP_SUFFIX = ".bak"
CACHE_SUFFIX = "_compiled.json"
READ_CHUNK_SIZE = 8192


# ============================================================================
# List syntax
# ============================================================================

LIST_COMMENT_RE = re.compile(r"#.*$")
LIST_PATTERN_RE = re.compile(r"^/(.+)/$")
LIST_URL_RE = re.compile(r"^https?://\S+", re.IGNORECASE)
WWW_PREFIX_RE = re.compile(r"^www\.", re.IGNORECASE)


# ============================================================================
# Input formats
# ============================================================================

TEXT_URL_RE = re.compile(r"^\s*(https?://\S+)", re.IGNORECASE)

APACHE_COMBINED_RE = re.compile(
    r'^\S+ - \S+ \[.+\] "[A-Z]+ \S+(?: \S+")? \d+ [\d-]+ "(.*)" ".*"$',
    re.IGNORECASE,
)
APACHE_NO_REFERRER = {"-", ""}

AWSTATS_HEADER_RE = re.compile(r"^AWSTATS DATA FILE\b")
AWSTATS_MAP_RE = re.compile(r"^BEGIN_MAP\b.*?^END_MAP[^\n]*\n?", re.MULTILINE | re.DOTALL)
AWSTATS_PAGEREFS_RE = re.compile(
    r"^BEGIN_PAGEREFS[^\n]*\n(?P<body>.*?)^END_PAGEREFS[^\n]*$",
    re.MULTILINE | re.DOTALL,
)
AWSTATS_URL_RE = re.compile(r"^(https?://\S+)", re.IGNORECASE)
