"""Tree and text rewriting passes applied to an enriched document."""
