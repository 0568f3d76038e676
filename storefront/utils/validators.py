from storefront.errors import ValidationError


def require_positive_int(v, name: str = "value") -> int:
    if isinstance(v, bool) or not isinstance(v, int):
        raise ValidationError(f"{name} must be an integer")
    if v < 1:
        raise ValidationError(f"{name} must be >= 1")
    return v
