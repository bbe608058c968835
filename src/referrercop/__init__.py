"""ReferrerCop - referrer spam filter for web server logs."""
