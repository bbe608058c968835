"""URL normalization, rule lists, and spam classification.

This package provides the classification engine:
- URLNormalizer: Reduce URLs to the keys used for list lookups
- RuleList: Compiled blacklist or whitelist with fingerprint-keyed caching
- Classifier: Whitelist-first spam/ham decision with a per-run memo
"""

from referrercop.classifier.normalizer import NormalizedURL, URLNormalizer
from referrercop.classifier.rulelist import RuleList, load_rule_list
from referrercop.classifier.classifier import Classifier

__all__ = [
    "NormalizedURL",
    "URLNormalizer",
    "RuleList",
    "load_rule_list",
    "Classifier",
]
