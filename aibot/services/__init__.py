"""Services package for aibot."""
