def normalize_label(label: str) -> str:
    """Normalize a reference label for matching (case folded, whitespace collapsed)."""
    return " ".join(label.split()).casefold()
