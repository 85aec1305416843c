from daydigest.privacy.leaks import validate_leaks

__all__ = ["validate_leaks"]
