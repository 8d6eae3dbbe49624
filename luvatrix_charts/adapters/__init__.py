from .normalize import normalize_records

__all__ = ["normalize_records"]
