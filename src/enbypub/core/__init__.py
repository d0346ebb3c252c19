"""Documents, path expressions and feeds."""
