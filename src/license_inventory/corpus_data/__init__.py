"""Canonical license texts bundled as the default reference corpus."""
