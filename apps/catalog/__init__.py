"""
Catalog App - cap designs and countries.

Only the records other apps reference live here; browsing, tagging and
photos are handled elsewhere.
"""
