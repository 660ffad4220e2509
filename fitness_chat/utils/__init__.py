"""
UTILITIES PACKAGE
=================

Helpers used by the services (no HTTP, no business logic):

  retry   - with_rotation(fn, max_attempts): calls fn(attempt); on a rate limit tries again, bounded.
  masking - mask_key(key): short preview of an API key for log lines.
"""
